"""
Permission Analyst Agent.

Reads web application markup and decides which Android manifest permissions
a WebView wrapper around it will need.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ..models.project import PermissionProfile
from .base import Agent, PromptTemplate


class PermissionAnalysisInput(BaseModel):
    """Input for the Permission Analyst Agent."""

    source_text: str = Field(description="Markup prefix to analyze")
    max_chars: int = Field(description="Length the source was truncated to")


class PermissionAnalystAgent(Agent[PermissionAnalysisInput, PermissionProfile]):
    """Agent for inferring Android permissions from HTML/JS source.

    The response is validated against ``PermissionProfile`` so a missing
    required field or a mistyped flag is treated as a failed invocation.
    """

    NAME = "permission_analyst"

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def description(self) -> str:
        return "Infers Android manifest permissions from web application source"

    @property
    def input_type(self) -> type[PermissionAnalysisInput]:
        return PermissionAnalysisInput

    @property
    def output_type(self) -> type[PermissionProfile]:
        return PermissionProfile

    def get_prompt_template(self) -> PromptTemplate:
        return PromptTemplate(
            template_id="permission_analyst_v1",
            version="1.0.0",
            system_prompt="""You are a senior Android engineer. You wrap web applications
(HTML/JS) in an Android WebView and decide which AndroidManifest.xml permissions
the wrapper must declare.

RULES:
1. Base every decision on evidence in the code, including implied usage:
   navigator.geolocation needs location, getUserMedia needs camera and/or
   microphone, <input type="file"> may need storage.
2. Network access is almost always required for web content.
3. Only list custom permissions the code clearly needs (e.g. VIBRATE for
   navigator.vibrate, BLUETOOTH for Web Bluetooth).
4. Custom permissions are bare Android permission names or fully-qualified
   identifiers, with no markup.
""",
            user_prompt_template="""Analyze the following web application code to understand which native
device features it accesses.

Code snippet (first {max_chars} characters):
{source_text}

Return a JSON object with this structure:
{{
    "usesInternet": true,
    "usesCamera": false,
    "usesLocation": false,
    "usesMicrophone": false,
    "usesStorage": false,
    "customPermissions": ["VIBRATE"],
    "reasoning": "Detailed explanation of why these permissions were chosen"
}}
"usesInternet", "usesCamera" and "reasoning" are required.
""",
            output_format_instructions="Respond with valid JSON only.",
        )

    def prepare_input(self, input_data: PermissionAnalysisInput) -> dict[str, Any]:
        return {
            "source_text": input_data.source_text,
            "max_chars": input_data.max_chars,
        }

    def validate_output(self, output: PermissionProfile) -> list[str]:
        warnings = []
        if not output.uses_internet:
            warnings.append("Model disabled network access; INTERNET is declared regardless")
        if not output.reasoning.strip():
            warnings.append("No reasoning provided")
        return warnings
