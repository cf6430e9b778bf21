"""Sprig: a minimal inversion-of-control container.

Sprig builds singleton beans from classes tagged as components. Inspired by
Spring's application context, it discovers the components of a package,
orders them so that dependencies are built first, creates each one with its
richest satisfiable constructor and then fills its tagged fields from other
beans and from external variables.

Key Features:
    - Constructor injection with automatic constructor selection
    - Field injection through ``typing.Annotated`` tags
    - Scalar and collection values read from the environment or from constants
    - Cycle detection before anything is instantiated
    - A read-only bean registry once the context is built

Basic Usage:
    >>> from typing import Annotated
    >>> from sprig.context import ApplicationContext
    >>> from sprig.markers import component, Value
    >>>
    >>> @component
    ... class Greeter:
    ...     home: Annotated[str, Value("HOME")]
    >>>
    >>> ctx = ApplicationContext([Greeter])
    >>> ctx.get_bean(Greeter).home

The package consists of several core modules:
    - markers: the ``@component``/``@constructor`` decorators and field tags
    - declarations, domain: introspection of component classes
    - graph: dependency graph and topological sort
    - bean_factory: constructor selection and instantiation
    - values, collection_parser: conversion of text into scalars and collections
    - population: the field population passes
    - variables: environment and constants lookup
    - discovery: scanning a package for components
    - context: the ``ApplicationContext`` entry point
    - errors: framework-specific exceptions
"""
