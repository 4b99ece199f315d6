"""
Test Fixtures

Common test classes used across test modules.

They live at module level so that their identifiers
(``"fixtures.<Name>"``) can be imported by a fresh container when
replaying a cached build plan.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from enum import Enum
from typing import Optional, Protocol, Union


class Service:
    """Service without dependencies"""
    pass


class Controller:
    """Controller with one autowired dependency"""

    def __init__(self, service: Service):
        self.service = service


class DeepController:
    """Two levels of nesting"""

    def __init__(self, controller: Controller):
        self.controller = controller


class Config:
    """Primitive parameter without default - needs a factory"""

    def __init__(self, api_key: str):
        self.api_key = api_key


class ServiceWithDefaults:
    """Primitive parameters with defaults"""

    def __init__(self, value: str = 'default', number: int = 42):
        self.value = value
        self.number = number


class ServiceWithKeywordOnly:
    """Keyword-only parameters"""

    def __init__(self, service: Service, *, retries: int = 3, label: str = 'kw'):
        self.service = service
        self.retries = retries
        self.label = label


class ServiceWithTupleDefault:
    """Default value that cannot be written to the cache file"""

    def __init__(self, dimensions: tuple = (1, 2)):
        self.dimensions = dimensions


class Mode(str, Enum):
    FAST = 'fast'
    SAFE = 'safe'


class ServiceWithSubclassDefaults:
    """Defaults whose types are subclasses of JSON types"""

    def __init__(self, counts: dict = defaultdict(int), mode: str = Mode.FAST):
        self.counts = counts
        self.mode = mode


class PluginRegistry:
    """Mutable list default"""

    def __init__(self, handlers: list = []):
        self.handlers = handlers


# ==================== Interfaces ====================

class LoggerInterface(ABC):
    """Interface marker (declares ABC directly)"""
    pass


class FileLogger(LoggerInterface):
    pass


class NullLogger(LoggerInterface):
    pass


class Repository(ABC):
    """Abstract class with an abstract method"""

    @abstractmethod
    def find(self, key): ...


class MemoryRepository(Repository):

    def find(self, key):
        return None


class Clock(Protocol):
    def now(self) -> float: ...


class UserController:
    """Controller depending on an interface"""

    def __init__(self, logger: LoggerInterface):
        self.logger = logger


class ProductController:
    def __init__(self, logger: LoggerInterface):
        self.logger = logger


# ==================== Optional / Nullable ====================

class ServiceWithOptionalLogger:
    """Optional interface dependency"""

    def __init__(self, logger: Optional[LoggerInterface] = None):
        self.logger = logger


class ServiceWithRequiredOptional:
    """Optional[...] annotation but no default"""

    def __init__(self, logger: Optional[LoggerInterface]):
        self.logger = logger


# ==================== Type Edge Cases ====================

class ServiceWithUnionDefault:
    def __init__(self, value: Union[str, int] = 'default'):
        self.value = value


class ServiceWithUnionNoDefault:
    def __init__(self, value: Union[str, int]):
        self.value = value


class ServiceWithNoTypeDefault:
    def __init__(self, value='default'):
        self.value = value


class ServiceWithNoTypeNoDefault:
    def __init__(self, value):
        self.value = value


class ServiceWithListDefault:
    def __init__(self, tags: list = None, options: dict = None):
        self.tags = tags
        self.options = options


# ==================== Failures ====================

class ExplodingService:
    """Constructor always raises"""

    def __init__(self):
        raise RuntimeError("boom")


class DependsOnExploding:
    def __init__(self, exploding: ExplodingService):
        self.exploding = exploding


class DependsOnConfig:
    """Dependency that has an unresolvable primitive"""

    def __init__(self, config: Config):
        self.config = config


# ==================== Circular Dependencies ====================

class CircularA:
    def __init__(self, b: 'CircularB'):
        self.b = b


class CircularB:
    def __init__(self, a: CircularA):
        self.a = a


class SelfDependent:
    def __init__(self, other: 'SelfDependent'):
        self.other = other


class CycleEntry:
    """Outer service whose dependency sits in a cycle"""

    def __init__(self, a: CircularA):
        self.a = a
