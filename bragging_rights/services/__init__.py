"""
Workflow Services
=================

Components:
    - RagWorkflow: orchestrates one saying-guessing run
    - open_services: scoped setup/teardown of the model client and vector store
"""

from bragging_rights.services.bootstrap import ServiceHandles, open_services
from bragging_rights.services.workflow import RagWorkflow

__all__ = [
    "RagWorkflow",
    "ServiceHandles",
    "open_services",
]
