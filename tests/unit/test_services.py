"""Unit tests for the permission inference and icon generation services."""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from webdroid.agents import AgentResponse
from webdroid.core.config import AnalysisConfig
from webdroid.core.exceptions import AgentError, ValidationError
from webdroid.models.project import FALLBACK_PERMISSIONS, PermissionProfile
from webdroid.services.icon import IconGenerationService
from webdroid.services.permissions import PermissionInferenceService


def _analyst(response=None, error=None):
    agent = MagicMock()
    agent.invoke = AsyncMock(return_value=response, side_effect=error)
    return agent


@pytest.mark.asyncio
class TestPermissionInferenceService:
    """Tests for PermissionInferenceService."""

    async def test_successful_inference(self, location_permissions, analysis_config):
        agent = _analyst(AgentResponse(success=True, output=location_permissions, total_tokens=42))
        service = PermissionInferenceService(agent=agent, config=analysis_config)

        result = await service.infer("<script>navigator.geolocation</script>", session_id="s1")

        assert result.success
        assert not result.fallback_used
        assert result.data == location_permissions
        assert result.metadata["total_tokens"] == 42
        input_data, context = agent.invoke.call_args.args
        assert input_data.source_text == "<script>navigator.geolocation</script>"
        assert context.session_id == "s1"

    async def test_source_is_truncated(self):
        agent = _analyst(AgentResponse(success=True, output=FALLBACK_PERMISSIONS))
        service = PermissionInferenceService(agent=agent, config=AnalysisConfig(max_source_chars=1000))

        await service.infer("x" * 5000)

        input_data = agent.invoke.call_args.args[0]
        assert input_data.source_text == "x" * 1000
        assert input_data.max_chars == 1000

    async def test_empty_markup_analyzed_as_generic(self, analysis_config):
        agent = _analyst(AgentResponse(success=True, output=FALLBACK_PERMISSIONS))
        await PermissionInferenceService(agent=agent, config=analysis_config).infer("")
        assert agent.invoke.call_args.args[0].source_text == "GENERIC_WEB_APP"

    async def test_agent_failure_degrades(self, analysis_config):
        """Test a failed agent response yields the fallback profile, not an error."""
        agent = _analyst(AgentResponse(success=False, error="Response does not match PermissionProfile"))
        result = await PermissionInferenceService(agent=agent, config=analysis_config).infer("<p/>")

        assert result.success
        assert result.fallback_used
        assert result.data == FALLBACK_PERMISSIONS
        assert "PermissionProfile" in result.error
        assert result.warnings

    async def test_agent_exception_degrades(self, analysis_config):
        agent = _analyst(error=RuntimeError("connection reset"))
        result = await PermissionInferenceService(agent=agent, config=analysis_config).infer("<p/>")

        assert result.fallback_used
        assert result.data.declared_permissions() == ["android.permission.INTERNET"]
        assert "connection reset" in result.error

    async def test_success_without_output_degrades(self, analysis_config):
        agent = _analyst(AgentResponse(success=True, output=None))
        result = await PermissionInferenceService(agent=agent, config=analysis_config).infer("<p/>")
        assert result.fallback_used


def _designer(data=None, error=None):
    agent = MagicMock()
    agent.generate = AsyncMock(return_value=data, side_effect=error)
    return agent


@pytest.mark.asyncio
class TestIconGenerationService:
    """Tests for IconGenerationService."""

    async def test_generated_icon(self, png_bytes, analysis_config):
        agent = _designer(png_bytes)
        service = IconGenerationService(agent=agent, config=analysis_config)

        result = await service.generate("DemoApp", "A weather app", session_id="s1")

        assert result.success
        assert not result.fallback_used
        assert result.data.is_embedded
        assert result.data.data == png_bytes
        assert result.data.to_data_uri().startswith("data:image/png;base64,")
        app_name, description, context = agent.generate.call_args.args
        assert (app_name, description) == ("DemoApp", "A weather app")
        assert context.stage == "design"

    async def test_failure_uses_placeholder(self, analysis_config):
        agent = _designer(error=AgentError(message="No image generated", agent_name="icon_designer"))
        result = await IconGenerationService(agent=agent, config=analysis_config).generate("DemoApp", "Notes")

        assert result.success
        assert result.fallback_used
        assert not result.data.is_embedded
        assert result.data.source_url == "https://picsum.photos/512/512"
        assert "No image generated" in result.error

    async def test_mime_type_follows_payload(self, analysis_config):
        """Test a JPEG payload is labelled as JPEG rather than assumed PNG."""
        buffer = io.BytesIO()
        Image.new("RGB", (64, 64), (0, 128, 0)).save(buffer, format="JPEG")
        agent = _designer(buffer.getvalue())

        result = await IconGenerationService(agent=agent, config=analysis_config).generate("DemoApp", "Maps")

        assert result.data.mime_type == "image/jpeg"
        assert result.data.to_data_uri().startswith("data:image/jpeg;base64,")

    async def test_unrecognized_payload_defaults_to_png(self, analysis_config):
        agent = _designer(b"opaque bytes")
        result = await IconGenerationService(agent=agent, config=analysis_config).generate("DemoApp", "Maps")
        assert result.data.mime_type == "image/png"

    @pytest.mark.parametrize("description", ["", "   "])
    async def test_description_required(self, description, analysis_config):
        agent = _designer(b"unused")
        service = IconGenerationService(agent=agent, config=analysis_config)
        with pytest.raises(ValidationError):
            await service.generate("DemoApp", description)
        agent.generate.assert_not_called()
