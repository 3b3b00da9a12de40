"""
Provider Clients
================

Chat completions clients for the remote LLM providers.

Available Providers:
- OpenAIClient: vision + text (image classification, OCR, second-chance text analysis)
- DeepSeekClient: text only (preferred text analyzer)

Usage:
    from document_classifier.providers import OpenAIClient, DeepSeekClient

    vision = OpenAIClient(api_key="...")
    request = vision.build_request("Que tipo de documento é esse?", image_url=data_uri)
    result = vision.call(request)
    if result.ok:
        print(result.text)
"""

from .base import BaseProviderClient
from .deepseek import DeepSeekClient
from .openai import OpenAIClient

__all__ = [
    "BaseProviderClient",
    "DeepSeekClient",
    "OpenAIClient",
]
