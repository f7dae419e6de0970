"""Text to image generation via Hugging Face inference"""

from typing import Any, Dict, Optional

import httpx

from capserve.cap.definition import OperationHandler
from capserve.cap.response import ResponseEnvelope
from capserve.config import ServerConfig
from capserve.schema.descriptor import SchemaDescriptor, string_field
from capserve.standard.errors import ConfigurationError, ProviderError
from capserve.standard.http import provider_client


PROVIDER = "Hugging Face"
IMAGE_MODEL = "black-forest-labs/FLUX.1-schnell"
INFERENCE_STEPS = 5
DEFAULT_IMAGE_MIME = "image/png"

IMAGE_SCHEMA = SchemaDescriptor.of(
    string_field("prompt", "Text prompt describing the image"),
)


def make_generate_image(config: ServerConfig, client: Optional[httpx.AsyncClient] = None) -> OperationHandler:
    """Build the image generation handler

    The token is read from config at call time. A missing token or a failed
    inference request raises; neither is reported as envelope text.
    """
    async def generate_image(args: Dict[str, Any]) -> ResponseEnvelope:
        if not config.hf_token:
            raise ConfigurationError("HF_TOKEN", "Set the HF_TOKEN environment variable or pass hf_token to ServerConfig.")

        url = f"{config.hf_inference_url}/{IMAGE_MODEL}"
        payload = {
            "inputs": args["prompt"],
            "parameters": {"num_inference_steps": INFERENCE_STEPS},
        }
        headers = {
            "Authorization": f"Bearer {config.hf_token}",
            "Accept": "image/png",
        }

        async with provider_client(config, client) as http:
            try:
                response = await http.post(url, json=payload, headers=headers)
            except httpx.HTTPError as e:
                raise ProviderError(PROVIDER, str(e) or type(e).__name__)

        if not response.is_success:
            raise ProviderError(PROVIDER, f"HTTP {response.status_code} {response.reason_phrase}")

        mime_type = response.headers.get("content-type", DEFAULT_IMAGE_MIME).split(";")[0].strip()
        if not mime_type.startswith("image/"):
            raise ProviderError(PROVIDER, f"expected image data, got '{mime_type}'")

        if not response.content:
            raise ProviderError(PROVIDER, "empty image payload")

        return ResponseEnvelope.image(response.content, mime_type)

    return generate_image
