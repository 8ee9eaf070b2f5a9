"""
Agent framework for webdroid.

Provides a reusable abstraction for LLM-based agents with type-safe
inputs/outputs, automatic retries, and output validation.
"""

from .base import Agent, AgentContext, AgentResponse, PromptTemplate
from .permission_analyst import PermissionAnalysisInput, PermissionAnalystAgent
from .icon_designer import IconDesignerAgent

__all__ = [
    "Agent",
    "AgentContext",
    "AgentResponse",
    "PromptTemplate",
    "PermissionAnalysisInput",
    "PermissionAnalystAgent",
    "IconDesignerAgent",
]
