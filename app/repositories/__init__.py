from .entity_repository import EntityRepository
from .memory_repository import InMemoryEntityRepository
from .sqlalchemy_repository import SqlAlchemyEntityRepository
