# app/services/authoring.py
import json
import logging
import re
from typing import Any, Dict, Optional

import httpx

from app.config import Config

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

SYSTEM_PROMPT = """
You are an expert TTRPG Battle Map Architect designed to generate procedural map configurations for a 2D tile-based game (D&D 5e style).

Your Output MUST be a valid JSON object strictly following this schema:
{
  "type": "structured" | "organic" | "geometric",
  "tone": "Normal" | "Sepia" | "Night" | "Toxic",
  "width": number (integer, min 40, max 60),
  "height": number (integer, min 40, max 60),
  "description": "Short summary of the map layout",
  "rooms": [
    {
      "id": "r1",
      "name": "Room Name",
      "type": "bedroom" | "living" | "kitchen" | "corridor" | "entrance" | "storage" | "bathroom" | "exterior" | "main" | "utility",
      "connections": ["r2", "r3"],
      "furniture": ["bed", "table", "chest"]
    }
  ]
}

RULES:
1. Map Size: MUST be spacious. Minimum 40x40 tiles. DO NOT generate small maps (e.g. 20x20).
2. Connectivity: Ensure ALL rooms are reachable. Use 'corridor' or 'hallway' as central hubs for 'structured' maps.
3. Logic:
   - 'structured': Houses/Buildings. Use logic (Foyer -> Hall -> Bedrooms).
   - 'organic': Caves/Forests. Irregular connections.
   - 'geometric': Towers/Ships. Symmetrical connections.
4. Furniture: List generic furniture IDs (bed, chest, table, chair, rug, sofa, tv, throne, bookshelf, gold, fire).
5. Room ids must be unique and every connection must name an existing room id.
6. Response must be JSON ONLY. No markdown formatting.
""".strip()


class AuthoringError(Exception):
    """The authoring service failed or replied with something that is not a room graph."""


def extract_json_from_response(text: str) -> Dict[str, Any]:
    """Extract JSON from a model reply that might contain markdown or extra text"""
    try:
        # Try direct JSON parsing first
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # fenced ```json blocks
    match = re.search(r"```(?:json)?\s*(\{.*\})\s*```", text, re.DOTALL)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    # first decodable object embedded in prose
    decoder = json.JSONDecoder()
    for start in (m.start() for m in re.finditer(r"\{", text)):
        try:
            obj, _ = decoder.raw_decode(text, start)
            return obj
        except json.JSONDecodeError:
            continue
    raise AuthoringError("No valid JSON found in the model response")


def build_prompt(text: str) -> str:
    return f"{SYSTEM_PROMPT}\n\nUser Request: {text}"


def build_payload(text: str) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": build_prompt(text)}]}],
        "generationConfig": {
            "response_mime_type": "application/json",
            "temperature": 0.2,
        },
    }


async def request_room_graph(text: str, client: Optional[httpx.AsyncClient] = None,
                             api_key: Optional[str] = None, model: Optional[str] = None) -> Dict[str, Any]:
    """Asks Gemini for a room graph describing `text`. The result is raw JSON; validate it before use."""
    api_key = api_key or Config.GEMINI_API_KEY
    if not api_key:
        raise AuthoringError("GEMINI_API_KEY is not configured")
    url = GEMINI_URL.format(model=model or Config.GEMINI_MODEL)

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=30.0) as own_client:
                resp = await own_client.post(url, params={"key": api_key}, json=build_payload(text))
        else:
            resp = await client.post(url, params={"key": api_key}, json=build_payload(text))
        resp.raise_for_status()
        data = resp.json()
        model_text = data["candidates"][0]["content"]["parts"][0]["text"]
    except httpx.HTTPStatusError as e:
        raise AuthoringError(f"Authoring service returned HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise AuthoringError(f"Authoring service request failed: {e}") from e
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise AuthoringError(f"Unexpected authoring response format: {e}") from e

    logger.debug("Raw authoring response: %s", model_text)
    graph = extract_json_from_response(model_text)
    if not isinstance(graph, dict):
        raise AuthoringError("Authoring response is not a JSON object")
    return graph
