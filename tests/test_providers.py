import json
import unittest

import httpx

from promptlens.config import Settings
from promptlens.models import CompletionRequest
from promptlens.services import HttpCompletionProvider

REQUEST = CompletionRequest(prompt="Analyze this.", system_prompt="You analyze prompts.")


def provider_for(handler, **settings):
    settings.setdefault("llm_base_url", "https://llm.test/v1/")
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpCompletionProvider(Settings(**settings), client=client), client


class TestHttpCompletionProvider(unittest.IsolatedAsyncioTestCase):
    async def test_successful_completion(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            content = '{"conflicts": []}'
            return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

        provider, client = provider_for(handler, llm_api_key="sk-test", llm_model="small-model")
        self.addAsyncCleanup(client.aclose)

        response = await provider(REQUEST)

        self.assertEqual(response.text, '{"conflicts": []}')
        self.assertIsNone(response.error)
        self.assertEqual(seen["url"], "https://llm.test/v1/chat/completions")
        self.assertEqual(seen["auth"], "Bearer sk-test")
        self.assertEqual(seen["body"]["model"], "small-model")
        self.assertEqual(
            seen["body"]["messages"],
            [
                {"role": "system", "content": "You analyze prompts."},
                {"role": "user", "content": "Analyze this."},
            ],
        )

    async def test_http_error_is_returned_not_raised(self):
        provider, client = provider_for(lambda request: httpx.Response(429, text="slow down"))
        self.addAsyncCleanup(client.aclose)

        response = await provider(REQUEST)

        self.assertEqual(response.text, "")
        self.assertEqual(response.error, "HTTP 429: slow down")

    async def test_transport_error_is_returned_not_raised(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider, client = provider_for(handler)
        self.addAsyncCleanup(client.aclose)

        response = await provider(REQUEST)
        self.assertTrue(response.error.startswith("Request error"))

    async def test_unexpected_payload(self):
        provider, client = provider_for(lambda request: httpx.Response(200, json={"choices": []}))
        self.addAsyncCleanup(client.aclose)

        response = await provider(REQUEST)
        self.assertTrue(response.error.startswith("Unexpected response payload"))

    async def test_no_api_key_sends_no_authorization(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

        provider, client = provider_for(handler, llm_api_key=None)
        self.addAsyncCleanup(client.aclose)

        self.assertEqual((await provider(REQUEST)).text, "ok")
        self.assertIsNone(seen["auth"])


if __name__ == "__main__":
    unittest.main()
