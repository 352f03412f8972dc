"""Declarative base shared by every TicketDesk model."""

import logging
from sqlalchemy.orm import declarative_base

Base = declarative_base()
logger = logging.getLogger(__name__)
