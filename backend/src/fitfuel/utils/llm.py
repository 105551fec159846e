# backend/src/fitfuel/utils/llm.py
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import requests


def _strip_fences(s: str) -> str:
    s = s.strip()
    if s.startswith("```"):
        s = s.strip("` \n")
        if s.lower().startswith("json"):
            s = s[4:].lstrip()
    return s


def llm_generate_json(
    system_prompt: str,
    user_prompt: str,
    model: str,
    endpoint: str,
    schema: Optional[Dict[str, Any]] = None,
    temperature: float = 0.3,
    timeout: float = 60.0,
    session: Optional[requests.Session] = None,
) -> Any:
    """
    Calls Ollama /api/chat and expects pure JSON back.

    With ``schema`` the model is constrained to that JSON schema (structured
    output). Code fences are stripped and the reply must be a JSON object or
    list. Raises ``requests.RequestException`` on transport/HTTP errors
    and ``ValueError`` when the reply is not the expected JSON.
    """
    url = endpoint.rstrip("/") + "/api/chat"
    payload: Dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "stream": False,
        "format": schema if schema is not None else "json",
        "options": {"temperature": temperature},
    }
    http = session or requests
    r = http.post(url, json=payload, timeout=timeout)
    r.raise_for_status()
    content = r.json().get("message", {}).get("content", "")
    content = _strip_fences(content)
    data = json.loads(content)
    if isinstance(data, (dict, list)):
        return data
    raise ValueError("Unexpected JSON shape from LLM")
