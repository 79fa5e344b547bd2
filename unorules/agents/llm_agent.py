"""LLM strategy using the OpenAI library against any OpenAI-compatible provider."""

import json
import logging
import re
import time
from typing import Any, Optional

from unorules.agent.protocol import Strategy
from unorules.agents.providers import ProviderRegistry
from unorules.engine import Card, Color, PlayerView

logger = logging.getLogger(__name__)

DEFAULT_PERSONALITY = "A sharp, competitive player who hates giving opponents an easy turn."


def _format_player_view(view: PlayerView) -> str:
    """Format player view as text for the LLM."""
    lines = [
        "=== Your hand ===",
        " ".join(str(c) for c in view.my_hand),
        "",
        "=== Top card on discard ===",
        str(view.top_discard) if view.top_discard else "None",
        "",
        "=== Current color to match ===",
        view.active_color.value.upper() if view.active_color else "any",
        "",
        "=== Other players' card counts ===",
    ]
    for pid, count in view.num_cards_per_player.items():
        if pid != view.player_id:
            marker = " (next)" if pid == view.next_player else ""
            lines.append(f"  {pid}: {count} cards{marker}")
    lines.extend([
        "",
        "=== Direction ===",
        "clockwise" if view.direction == 1 else "counter-clockwise",
        "",
        "=== Pending penalty draws ===",
        str(view.pending_draws),
        "",
        "=== Game History (last 10 events) ===",
    ])
    if view.history:
        lines.extend(f"- {h}" for h in view.history)
    else:
        lines.append("No history yet.")
    return "\n".join(lines)


def _format_cards(cards: list[Card]) -> str:
    return "\n".join(f"{i}: {card}" for i, card in enumerate(cards))


def _extract_json(response: str) -> Optional[dict]:
    match = re.search(r"(\{.*?\})", response, re.DOTALL)
    if not match:
        return None
    json_str = match.group(1)
    for candidate in (json_str, json_str.replace("'", '"')):
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _parse_card_response(response: str, cards: list[Card]) -> Optional[Card]:
    """Parse an LLM reply into one of ``cards``."""
    data = _extract_json(response)
    if data is not None and "card_index" in data:
        try:
            idx = int(data["card_index"])
        except (TypeError, ValueError):
            idx = -1
        if 0 <= idx < len(cards):
            return cards[idx]
        logger.debug("Index %r out of range (0-%d)", data["card_index"], len(cards) - 1)

    # "card_index": N with any quoting
    match = re.search(r'["\']?card_index["\']?\s*:\s*(\d+)', response, re.IGNORECASE)
    if match:
        idx = int(match.group(1))
        if 0 <= idx < len(cards):
            return cards[idx]

    # Card named literally, e.g. "red_7"
    lowered = response.lower()
    for card in cards:
        if re.search(rf"\b{re.escape(str(card))}\b", lowered):
            return card

    # Last resort: a standalone number
    cleaned = re.sub(r"[{}\[\]\"'.,:]", " ", response)
    for word in cleaned.split():
        if word.isdigit():
            idx = int(word)
            if 0 <= idx < len(cards):
                return cards[idx]
    return None


def _parse_color_response(response: str) -> Optional[Color]:
    """Parse an LLM reply into a playable color."""
    data = _extract_json(response)
    if data is not None and isinstance(data.get("color"), str):
        value = data["color"].strip().lower()
        if value in {c.value for c in Color.playable()}:
            return Color(value)
    for color in Color.playable():
        if re.search(rf"\b{color.value}\b", response, re.IGNORECASE):
            return color
    return None


def _parse_target_response(response: str, candidates: list[str]) -> Optional[str]:
    """Parse an LLM reply into one of the candidate player ids."""
    data = _extract_json(response)
    if data is not None and data.get("player_id") in candidates:
        return data["player_id"]
    for pid in candidates:
        if re.search(rf"\b{re.escape(pid)}\b", response):
            return pid
    return None


class LLMStrategy:
    """Strategy that asks an LLM, falling back to another strategy.

    Every failure mode (transport error, timeout, unparseable or illegal
    answer) after ``retry_attempts`` tries is answered by ``fallback``.
    """

    def __init__(
        self,
        client: Any,
        model: str,
        fallback: Strategy,
        provider: str = "custom",
        timeout: float = 30.0,
        retry_attempts: int = 3,
        rate_limit: Optional[float] = None,
        temperature: float = 0.7,
        json_mode: bool = False,
        personality: str = DEFAULT_PERSONALITY,
    ):
        self._client = client
        self._model = model
        self._fallback = fallback
        self._provider = provider
        self._timeout = timeout
        self._retry_attempts = max(1, retry_attempts)
        self._rate_limit = rate_limit  # Requests per minute
        self._temperature = temperature
        self._json_mode = json_mode
        self._personality = personality
        self._request_history: list[float] = []

        logger.info(
            "[%s] Initialized with provider=%s, timeout=%ss, rate_limit=%s rpm",
            self.name, provider, timeout, rate_limit or "None",
        )

    @classmethod
    def from_registry(
        cls,
        registry: ProviderRegistry,
        provider: str,
        fallback: Strategy,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        **kwargs: Any,
    ) -> "LLMStrategy":
        config = registry.get(provider)
        kwargs.setdefault("json_mode", config.json_mode)
        return cls(
            client=registry.create_client(provider, api_key),
            model=model or config.default_model,
            fallback=fallback,
            provider=provider,
            **kwargs,
        )

    @property
    def name(self) -> str:
        return f"llm-{self._model}"

    @property
    def fallback(self) -> Strategy:
        return self._fallback

    def _wait_for_rate_limit(self) -> None:
        """Block if rate limit is exceeded."""
        if not self._rate_limit:
            return

        now = time.monotonic()
        # Filter history to last 60 seconds
        self._request_history = [t for t in self._request_history if now - t < 60.0]

        if len(self._request_history) >= self._rate_limit:
            # Wait until the oldest request in the window expires
            wait_time = 60.0 - (now - self._request_history[0])
            if wait_time > 0:
                logger.info("[%s] Rate limit reached, waiting %.2fs", self.name, wait_time)
                time.sleep(wait_time)

        self._request_history.append(time.monotonic())

    def _complete(self, prompt: str) -> str:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": f"You are an AI player in a game of UNO. Your personality: {self._personality}"},
                {"role": "user", "content": prompt},
            ],
            "temperature": self._temperature,
            "timeout": self._timeout,
        }
        if self._json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        resp = self._client.chat.completions.create(**kwargs)
        return resp.choices[0].message.content or ""

    def _ask(self, prompt: str, parse):
        """Query the model until ``parse`` accepts a reply; None on give-up."""
        for attempt in range(1, self._retry_attempts + 1):
            start_time = time.monotonic()
            try:
                self._wait_for_rate_limit()
                logger.debug("[%s] Attempt %d: sending request to %s", self.name, attempt, self._provider)
                content = self._complete(prompt)
            except Exception as e:
                duration = time.monotonic() - start_time
                logger.warning(
                    "[%s] Error on attempt %d after %.2fs: %s: %s",
                    self.name, attempt, duration, type(e).__name__, e,
                )
                continue

            logger.debug("[%s] Received response in %.2fs", self.name, time.monotonic() - start_time)
            result = parse(content)
            if result is not None:
                return result
            logger.warning("[%s] Failed to parse response on attempt %d: %r", self.name, attempt, content)
        return None

    def choose_card(self, playable: list[Card], view: PlayerView) -> Optional[Card]:
        # Nothing to decide
        if len(playable) <= 1:
            return playable[0] if playable else None

        prompt = f"""Objective: win by getting rid of all your cards. Match the top discard card by color or value; wild cards can be played on anything.

{_format_player_view(view)}

=== Playable cards ===
{_format_cards(playable)}

INSTRUCTIONS:
Select the best card to play.
Respond with a JSON object containing the index of your chosen card.
Example: {{"card_index": 1, "reasoning": "brief explanation"}}
"""
        card = self._ask(prompt, lambda content: _parse_card_response(content, playable))
        if card is not None:
            return card
        logger.info("[%s] All retries failed. Using %s.", self.name, self._fallback.name)
        return self._fallback.choose_card(playable, view)

    def choose_wild_color(self, hand: list[Card], view: PlayerView) -> Color:
        prompt = f"""You just played a wild card and must choose the new color.

{_format_player_view(view)}

Choose one of: red, blue, green, yellow.
Respond with a JSON object.
Example: {{"color": "blue", "reasoning": "brief explanation"}}
"""
        color = self._ask(prompt, _parse_color_response)
        if color is not None:
            return color
        logger.info("[%s] All retries failed. Using %s.", self.name, self._fallback.name)
        return self._fallback.choose_wild_color(hand, view)

    def choose_swap_target(self, view: PlayerView) -> str:
        opponents = [pid for pid in view.player_order if pid != view.player_id]
        prompt = f"""You just played a 7 and must swap your whole hand with another player.

{_format_player_view(view)}

Choose one of: {", ".join(opponents)}.
Respond with a JSON object.
Example: {{"player_id": "{opponents[0]}", "reasoning": "brief explanation"}}
"""
        target = self._ask(prompt, lambda content: _parse_target_response(content, opponents))
        if target is not None:
            return target
        logger.info("[%s] All retries failed. Using %s.", self.name, self._fallback.name)
        return self._fallback.choose_swap_target(view)
