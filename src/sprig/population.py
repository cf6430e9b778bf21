"""Population of bean fields after instantiation.

Three passes run in a fixed order over every bean:

1. ``Autowired`` fields receive other beans;
2. ``Value`` fields receive one converted external variable;
3. ``MultiValue`` fields receive a collection parsed from a delimited variable.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

from sprig.collection_parser import CollectionParser, split_values
from sprig.declarations import describe
from sprig.domain import FieldSpec
from sprig.errors import IllegalTypeError, UnableToSetValueError
from sprig.markers import Autowired, MultiValue, Value
from sprig.values import DEFAULT_CONVERTER, ScalarConverter
from sprig.variables import EnvironmentVariableSource, VariableSource

__all__ = ["FieldPopulator"]

logger = logging.getLogger(__name__)

FieldResolver = Callable[[type, FieldSpec], Any]
FieldCondition = Callable[[type, FieldSpec], bool]


class FieldPopulator:
    """Assign tagged fields of already instantiated beans.

    Args:
        variables: Source of external values; defaults to the process environment.
        converter: Scalar conversion table.
        collection_parser: Parser for ``MultiValue`` fields.
    """

    def __init__(
        self,
        variables: Optional[VariableSource] = None,
        converter: Optional[ScalarConverter] = None,
        collection_parser: Optional[CollectionParser] = None,
    ):
        self._variables = variables or EnvironmentVariableSource()
        self._converter = converter or DEFAULT_CONVERTER
        self._collection_parser = collection_parser or CollectionParser(self._converter)

    def populate(self, beans: Mapping[type, Any]):
        """Run the injection, scalar-value and multi-value passes over ``beans``.

        Raises:
            UnableToSetValueError: If a field cannot be assigned.
            IllegalTypeError: If a tagged field has an unsupported type.
            NoSuchVariableError: If an external variable is missing.
            UnmappableStringError: If a mapping entry has no ``key:value`` form.
            ConversionError: If a value cannot be converted.
        """
        self.populate_autowired_fields(beans)
        self.populate_value_fields(beans)
        self.populate_multi_value_fields(beans)

    def populate_autowired_fields(self, beans: Mapping[type, Any]):
        def resolve(bean_type: type, field: FieldSpec) -> Any:
            if field.declared_type not in beans:
                logger.warning(
                    "Field %s.%s is autowired but %r is not a managed component",
                    bean_type.__name__,
                    field.name,
                    field.declared_type,
                )
            return beans.get(field.declared_type)

        self._populate_fields(
            beans,
            resolve,
            lambda bean_type, field: isinstance(field.tag, Autowired)
            and field.declared_type is not bean_type,
        )

    def populate_value_fields(self, beans: Mapping[type, Any]):
        self._populate_fields(
            beans,
            self.resolve_value,
            lambda bean_type, field: isinstance(field.tag, Value),
        )

    def populate_multi_value_fields(self, beans: Mapping[type, Any]):
        self._populate_fields(
            beans,
            self.resolve_multi_value,
            lambda bean_type, field: isinstance(field.tag, MultiValue),
        )

    def resolve_value(self, bean_type: type, field: FieldSpec) -> Any:
        """Look up and convert the variable named by a ``Value`` field."""
        if not self._converter.supports(field.declared_type):
            raise IllegalTypeError(
                f"Illegal type of field {bean_type.__name__}.{field.name}: "
                f"{field.declared_type!r}"
            )
        content = self._variables.lookup(field.tag.name)
        return self._converter.convert(content, field.declared_type)

    def resolve_multi_value(self, bean_type: type, field: FieldSpec) -> Any:
        """Look up and parse the delimited variable named by a ``MultiValue`` field."""
        try:
            shape = self._collection_parser.validate(field.declared_type)
        except IllegalTypeError as e:
            raise IllegalTypeError(f"{bean_type.__name__}.{field.name}: {e}") from e
        content = self._variables.lookup(field.tag.name)
        return self._collection_parser.build(
            shape, split_values(content, field.tag.delimiter)
        )

    def _populate_fields(
        self,
        beans: Mapping[type, Any],
        resolve: FieldResolver,
        condition: FieldCondition,
    ):
        """
        Assign every field of every bean that meets ``condition``.

        Args:
            beans: Beans keyed by their managed type.
            resolve: Computes the value of a field.
            condition: Takes the bean's managed type and a field, and tells whether to process it.
        """
        for bean_type, bean in beans.items():
            for field in describe(type(bean)).fields:
                if not condition(bean_type, field):
                    continue
                value = resolve(bean_type, field)
                try:
                    setattr(bean, field.name, value)
                except (AttributeError, TypeError) as e:
                    raise UnableToSetValueError(
                        f"Unable to set {bean_type.__name__}.{field.name}: {e}"
                    ) from e
                logger.debug("Populated %s.%s", bean_type.__name__, field.name)
