# Import unified models so they're registered on Base.metadata
from .unified_models import Base, Account, Campaign, Assignment, Payment
from .connection import init_database, close_database, create_tables, get_session, get_entity_repository
