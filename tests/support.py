"""Test doubles and sample data shared across suites."""

import json
import time
import uuid
from typing import Any

from jose import jwt

from tripgen.errors import ProviderError
from tripgen.llm.prompts import ComposedPrompt

JWT_SECRET = "test-secret"


def sample_itinerary(destination: str = "Tokyo, Japan") -> dict[str, Any]:
    """A small model response in the camelCase wire shape."""
    return {
        "destination": destination,
        "heroImageKeyword": "tokyo skyline",
        "flights": {
            "outbound": {
                "airline": "Cathay Pacific",
                "departureTime": "09:00 AM",
                "arrivalTime": "02:00 PM",
                "estCost": "USD 420",
                "estCostNumber": 420,
                "bookingUrl": "https://search.aviasales.com/flights/?origin_iata=HKG",
            },
            "return": {
                "airline": "Cathay Pacific",
                "departureTime": "05:00 PM",
                "arrivalTime": "09:00 PM",
                "estCost": "Included",
                "estCostNumber": 0,
            },
        },
        "hotel": {
            "name": "Recommended Hotel near TYO",
            "estCost": "USD 100 / night",
            "estCostNumber": 300,
            "bookingUrl": "https://search.hotellook.com/hotels/?destination=TYO",
        },
        "adviceArr": [
            {"title": "Transport", "content": "Get a Suica card."},
            {"title": "Weather", "content": "Bring a light jacket."},
            {"title": "Customs", "content": "No tipping."},
        ],
        "days": [
            {
                "date": "2026-11-01",
                "theme": "Arrival",
                "activities": [
                    {"time": "04:00 PM", "title": "Check in", "cost": "USD 0", "costNumber": 0},
                    {
                        "time": "07:00 PM",
                        "title": "Dinner in Shinjuku",
                        "cost": "USD 30",
                        "costNumber": 30,
                    },
                ],
            },
            {
                "date": "2026-11-02",
                "theme": "Temples",
                "activities": [
                    {
                        "time": "09:00 AM",
                        "title": "Senso-ji",
                        "costNumber": 0,
                        "needsTicket": False,
                    },
                    {
                        "time": "08:00 PM",
                        "title": "Evening at Shibuya Sky",
                        "costNumber": 25,
                        "needsTicket": True,
                        "ticketUrl": "https://www.klook.com/shibuya-sky",
                    },
                ],
            },
            {
                "date": "2026-11-03",
                "theme": "Departure",
                "activities": [{"time": "10:00 AM", "title": "Tsukiji breakfast", "costNumber": 15}],
            },
        ],
    }


class FakeProvider:
    """ChatProvider double that replays scripted responses or errors."""

    def __init__(self, name: str, responses: list[Any] | None = None) -> None:
        self.name = name
        self.responses = list(responses or [])
        self.prompts: list[ComposedPrompt] = []

    async def complete(self, prompt: ComposedPrompt) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise ProviderError(self.name, "no scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return str(response)

    @property
    def calls(self) -> int:
        return len(self.prompts)


def mint_token(account_id: uuid.UUID, secret: str = JWT_SECRET) -> str:
    """HS256 bearer token the test settings accept."""
    now = int(time.time())
    claims = {"sub": str(account_id), "aud": "authenticated", "iat": now, "exp": now + 600}
    return str(jwt.encode(claims, secret, algorithm="HS256"))
