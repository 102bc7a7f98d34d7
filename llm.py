"""
Unified Gemini caller. All LLM traffic (text and image) goes through here.
Falls through the configured models in priority order, retries on rate
limits, and caches identical text prompts for the duration of a run.
"""

import hashlib
import time

import requests

import config
from config import API_ENDPOINTS, LLM_CONFIGS, TIMEOUTS
from errors import RateLimitError

# Simple in-memory cache for this run (avoids re-calling for identical prompts)
_cache = {}

MAX_ATTEMPTS = 3


def is_configured():
    return bool(config.GEMINI_API_KEY)


def generate_text(prompt, use_cache=True, web_search=False, max_tokens=32768):
    """Generate text with the first model that answers. Returns {"text", "model"} or None."""
    if not is_configured():
        return None

    cache_key = None
    if use_cache:
        cache_key = hashlib.md5("{}:{}".format(prompt, web_search).encode()).hexdigest()
        if cache_key in _cache:
            return _cache[cache_key]

    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"maxOutputTokens": max_tokens, "temperature": 0.4},
    }
    if web_search:
        payload["tools"] = [{"google_search": {}}]

    for model in LLM_CONFIGS["text"]:
        data = call(model, payload)
        if not data:
            continue
        text = _extract_text(data, model, max_tokens)
        if text:
            result = {"text": text, "model": model}
            if cache_key:
                _cache[cache_key] = result
            return result
    return None


def generate_image(prompt):
    """Generate tile artwork. Returns {"data_url", "model"} or None."""
    if not is_configured():
        return None

    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"responseModalities": ["IMAGE"]},
    }
    for model in LLM_CONFIGS["image"]:
        data = call(model, payload)
        if not data:
            continue
        for part in _parts(data):
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                mime = inline.get("mimeType") or inline.get("mime_type") or "image/png"
                return {"data_url": "data:{};base64,{}".format(mime, inline["data"]), "model": model}
        print("    WARNING: {} returned no image".format(model))
    return None


def call(model, payload):
    """POST one generateContent request with retry on 429.

    Returns the decoded JSON, or None on a non-retryable failure.
    Raises RateLimitError once every attempt was rate limited.
    """
    url = API_ENDPOINTS["gemini"].format(model=model)
    for attempt in range(MAX_ATTEMPTS):
        try:
            resp = requests.post(url, params={"key": config.GEMINI_API_KEY}, json=payload,
                                 timeout=TIMEOUTS["gemini_seconds"])
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 429:
                wait = (attempt + 1) * 8
                print("    ... rate limited, waiting {}s (attempt {}/{})".format(
                    wait, attempt + 1, MAX_ATTEMPTS))
                time.sleep(wait)
            else:
                code = e.response.status_code if e.response is not None else "unknown"
                print("  X gemini/{}: HTTP {}".format(model, code))
                return None
        except (requests.exceptions.RequestException, ValueError) as e:
            print("  X gemini/{}: {}".format(model, str(e)[:100]))
            return None
    raise RateLimitError("gemini/{} still rate limited after {} attempts".format(model, MAX_ATTEMPTS))


def _parts(data):
    candidates = data.get("candidates") or []
    if not candidates:
        return []
    return (candidates[0].get("content") or {}).get("parts") or []


def _extract_text(data, model, max_tokens):
    candidates = data.get("candidates") or []
    if candidates and candidates[0].get("finishReason") == "MAX_TOKENS":
        print("    WARNING: {} hit max tokens ({})".format(model, max_tokens))
    text_parts = [p["text"] for p in _parts(data) if "text" in p]
    return "\n".join(text_parts)
