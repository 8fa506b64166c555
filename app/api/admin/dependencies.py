"""
Request-scoped service providers for the admin routes

Every request gets fresh service instances over the configured entity
repository. Tests swap the repository through app.dependency_overrides.
"""
from fastapi import Depends

from app.database.connection import get_entity_repository
from app.repositories.entity_repository import EntityRepository
from app.services.aggregation_engine import AggregationEngine
from app.services.ecosystem_graph_service import EcosystemGraphService
from app.services.matchmaking_service import MatchmakingService
from app.services.notification_service import NotificationService
from app.services.payment_service import PaymentService


def get_aggregation_engine(repository: EntityRepository = Depends(get_entity_repository)) -> AggregationEngine:
    return AggregationEngine(repository)


def get_graph_service(repository: EntityRepository = Depends(get_entity_repository)) -> EcosystemGraphService:
    return EcosystemGraphService(repository)


def get_matchmaking_service(repository: EntityRepository = Depends(get_entity_repository)) -> MatchmakingService:
    return MatchmakingService(repository)


def get_notification_service(repository: EntityRepository = Depends(get_entity_repository)) -> NotificationService:
    return NotificationService(repository)


def get_payment_service(repository: EntityRepository = Depends(get_entity_repository)) -> PaymentService:
    return PaymentService(repository)
