"""
TypeDescriptor

This module provides the type introspection used for autowiring:

- Mapping between classes and their string identifiers
- Instantiability checks (abstract classes, Protocols, ABC interfaces)
- Constructor parameter analysis for the parameter resolution policy

The resolver only talks to the descriptors defined here; it never calls
``inspect`` itself.
"""

import importlib
import inspect
import sys
import types
import typing
from abc import ABC
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from .exceptions import UnresolvableError

_NoneType = type(None)
_UNION_TYPES: Tuple[Any, ...] = (Union,)
if hasattr(types, 'UnionType'):
    _UNION_TYPES += (types.UnionType,)


def type_identifier(cls: type) -> str:
    """Return the identifier of a class: ``"<module>.<qualname>"``.

    Example::

        >>> type_identifier(collections.OrderedDict)
        'collections.OrderedDict'
    """
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True)
class ParameterDescriptor:
    """What the resolution policy needs to know about one parameter.

    Attributes:
        name: Parameter name
        keyword_only: Whether the parameter must be passed by keyword
        declared_type: The single concrete type, or None
        has_single_concrete_type: False when untyped or a union of several types
        is_builtin_primitive: True for builtins and non-class annotations
        has_default: Whether a default value exists
        default: The default value (None when absent)
    """
    name: str
    keyword_only: bool
    declared_type: Any
    has_single_concrete_type: bool
    is_builtin_primitive: bool
    has_default: bool
    default: Any = None

    @property
    def is_optional(self) -> bool:
        return self.has_default

    @property
    def declared_type_identifier(self) -> Optional[str]:
        if isinstance(self.declared_type, type):
            return type_identifier(self.declared_type)
        return None

    @property
    def type_name(self) -> str:
        if isinstance(self.declared_type, type):
            return self.declared_type.__name__
        return str(self.declared_type)


class TypeDescriptor:
    """Introspection result for one class.

    Attributes:
        cls: The described class
        instantiable: False for abstract classes, Protocols and ABC interfaces
        has_constructor: False when the class inherits ``object.__init__``
        parameters: Constructor parameters in declaration order
    """

    def __init__(self, cls: type):
        self.cls = cls
        self.instantiable = is_instantiable(cls)
        self.has_constructor = cls.__init__ is not object.__init__
        self.parameters: List[ParameterDescriptor] = []
        if self.instantiable and self.has_constructor:
            self.parameters = self._describe_parameters(cls)

    @staticmethod
    def _describe_parameters(cls: type) -> List[ParameterDescriptor]:
        """Extract parameter descriptors from a class constructor.

        Raises:
            UnresolvableError: When the constructor signature cannot be inspected
        """
        try:
            sig = inspect.signature(cls)
        except (ValueError, TypeError) as e:
            raise UnresolvableError(
                f"Cannot inspect constructor of '{type_identifier(cls)}'.",
                f"inspect.signature() failed: {e}. "
                f"This may occur with built-in types or C extension classes.",
            ) from e

        # Resolve string annotations (forward references and PEP 563)
        resolved_hints = _resolve_type_hints(cls)

        parameters = []
        for param_name, param in sig.parameters.items():
            # Skip *args and **kwargs (VAR_POSITIONAL and VAR_KEYWORD)
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            annotation = resolved_hints.get(param_name, param.annotation)
            if isinstance(annotation, str):
                annotation = _resolve_string_annotation(cls, annotation)

            declared_type = _single_concrete_type(annotation)
            has_default = param.default is not inspect.Parameter.empty

            parameters.append(ParameterDescriptor(
                name=param_name,
                keyword_only=param.kind == inspect.Parameter.KEYWORD_ONLY,
                declared_type=declared_type,
                has_single_concrete_type=declared_type is not None,
                is_builtin_primitive=declared_type is not None and _is_builtin(declared_type),
                has_default=has_default,
                default=param.default if has_default else None,
            ))
        return parameters


class TypeIndex:
    """Two-way mapping between identifiers and classes.

    Classes passed to the container (or found in constructor annotations)
    are remembered, so classes that cannot be imported by dotted path
    still resolve. Unknown identifiers are imported on demand.
    """

    def __init__(self):
        self._types: Dict[str, type] = {}
        self._descriptors: Dict[type, TypeDescriptor] = {}

    def identify(self, key: Union[str, type]) -> str:
        """Return the identifier for a string key or a class."""
        if isinstance(key, type):
            identifier = type_identifier(key)
            if not _is_builtin(key):
                self._types.setdefault(identifier, key)
            return identifier
        return key

    def lookup(self, identifier: str) -> Optional[type]:
        """Return the class an identifier names, or None."""
        cls = self._types.get(identifier)
        if cls is None:
            cls = _import_type(identifier)
            if cls is None:
                return None
            self._types[identifier] = cls
        return cls

    def describe(self, cls: type) -> TypeDescriptor:
        descriptor = self._descriptors.get(cls)
        if descriptor is None:
            descriptor = TypeDescriptor(cls)
            self._descriptors[cls] = descriptor
            for param in descriptor.parameters:
                if param.has_single_concrete_type and not param.is_builtin_primitive:
                    self._types.setdefault(param.declared_type_identifier, param.declared_type)
        return descriptor


def is_instantiable(cls: type) -> bool:
    """Check whether autowiring may call the class."""
    if inspect.isabstract(cls):
        return False
    if getattr(cls, '_is_protocol', False):
        return False
    # A class declaring ABC directly is treated as an interface
    return ABC not in cls.__bases__


def _is_builtin(declared_type: Any) -> bool:
    # typing.Any is a class from Python 3.11 on
    if declared_type is Any or not isinstance(declared_type, type):
        return True
    return declared_type.__module__ == 'builtins'


def _single_concrete_type(annotation: Any) -> Any:
    """Reduce an annotation to one concrete type, or None.

    ``Optional[X]`` is treated as a nullable ``X``; other unions and
    missing annotations have no single concrete type.
    """
    if annotation is inspect.Parameter.empty or annotation is None or isinstance(annotation, str):
        return None

    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        return _single_concrete_type(typing.get_args(annotation)[0])

    if origin in _UNION_TYPES:
        members = [arg for arg in typing.get_args(annotation) if arg is not _NoneType]
        if len(members) == 1 and len(typing.get_args(annotation)) == 2:
            return _single_concrete_type(members[0])
        return None

    return annotation


def _resolve_type_hints(cls: type) -> Dict[str, Any]:
    """Resolve type hints for a constructor using typing.get_type_hints().

    Returns an empty dict when resolution fails, allowing fallback to
    manual resolution of each string annotation.
    """
    try:
        return typing.get_type_hints(cls.__init__, include_extras=True)
    except Exception:
        return {}


def _resolve_string_annotation(cls: type, annotation: str) -> Any:
    """Look a forward reference up in the defining module or the class.

    Only plain (optionally dotted) names are resolved; anything else is
    returned unchanged and later treated as having no concrete type.
    """
    namespace: Dict[str, Any] = {}
    module = sys.modules.get(cls.__module__)
    if module is not None:
        namespace.update(vars(module))
    namespace.update(vars(cls))

    head, _, rest = annotation.strip().partition('.')
    value = namespace.get(head, annotation)
    for part in rest.split('.') if rest else ():
        value = getattr(value, part, None)
        if value is None:
            return annotation
    return value


def _import_type(identifier: str) -> Optional[type]:
    """Import ``"package.module.Class"`` (or a nested class path)."""
    parts = identifier.split('.')
    if len(parts) < 2 or not all(part.isidentifier() for part in parts):
        return None

    for split in range(len(parts) - 1, 0, -1):
        module_name = '.'.join(parts[:split])
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue

        for attribute in parts[split:]:
            target = getattr(target, attribute, None)
            if target is None:
                return None

        if isinstance(target, type) and target.__module__ != 'builtins':
            return target
        return None
    return None
