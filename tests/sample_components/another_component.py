from typing import Annotated

from sprig.markers import Value, component


@component
class AnotherComponent:
    home_directory: Annotated[str, Value("HOME")]
    number: Annotated[int, Value("number")]
