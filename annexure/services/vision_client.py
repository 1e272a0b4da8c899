"""Client for the OpenRouter vision model used by extraction and the anomaly check."""

import base64
import logging
from typing import Any, Dict, List, Optional
import httpx

from annexure.config.settings import Settings, get_settings
from annexure.errors import VisionServiceError

logger = logging.getLogger(__name__)


def build_vision_messages(
    system_prompt: str,
    prompt: str,
    image_bytes_list: List[bytes],
) -> List[Dict[str, Any]]:
    """
    Build chat messages carrying an instruction followed by page images.

    Images are attached as base64 PNG data URLs in the order given.
    """
    content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]

    for img_bytes in image_bytes_list:
        base64_image = base64.b64encode(img_bytes).decode("utf-8")
        content.append({
            "type": "image_url",
            "image_url": {"url": f"data:image/png;base64,{base64_image}"},
        })

    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": content},
    ]


class VisionClient:
    """Sends chat-completion payloads to OpenRouter and returns the reply text."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.settings.openrouter_base_url.rstrip('/')}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        api_key = self.settings.openrouter_api_key
        if not api_key:
            logger.error("OPEN_ROUTER_API_KEY environment variable is not set")
            raise VisionServiceError(
                "OPEN_ROUTER_API_KEY environment variable is not set. Please check your .env file."
            )

        return {
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": self.settings.site_url,
            "X-Title": self.settings.site_name,
            "Content-Type": "application/json",
        }

    async def complete(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        Send a chat-completions payload and return the assistant message text.

        Args:
            payload: OpenRouter request body (model, messages, optional response_format)

        Returns:
            The reply text, or None when the model returned no content

        Raises:
            VisionServiceError: On transport errors, HTTP errors or an unexpected response shape
        """
        headers = self._headers()
        logger.info(f"Sending request to OpenRouter with model: {payload.get('model')}")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(url=self.endpoint, headers=headers, json=payload)
                response.raise_for_status()
                response_data = response.json()
        except httpx.HTTPStatusError as e:
            try:
                error_detail = e.response.json().get("error", {}).get("message", str(e))
            except (ValueError, AttributeError):
                error_detail = str(e)
            logger.error(f"OpenRouter API HTTP error: {error_detail}")
            raise VisionServiceError(f"OpenRouter API error: {error_detail}") from e
        except httpx.HTTPError as e:
            logger.error(f"OpenRouter API HTTP error: {str(e)}")
            raise VisionServiceError(f"Failed to connect to OpenRouter API: {str(e)}") from e
        except ValueError as e:
            logger.error(f"OpenRouter returned a non-JSON body: {str(e)}")
            raise VisionServiceError("Invalid response body from OpenRouter API") from e

        try:
            content = response_data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Invalid response format from OpenRouter: {response_data}")
            raise VisionServiceError("Invalid response format from OpenRouter API") from e

        # Some providers return content as a list of typed parts
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )

        if content is None:
            logger.warning("OpenRouter returned an empty message")
            return None

        logger.info(f"Vision model response received: {len(content)} characters")
        logger.debug(f"Response preview: {content[:200]}...")
        return content
