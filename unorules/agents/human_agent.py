"""Human strategy - reads choices from the terminal."""

from typing import Optional

from unorules.engine import Card, Color, PlayerView


class HumanStrategy:
    """Strategy that prompts the human for input via terminal."""

    def __init__(self, name: str = "human"):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def _prompt_index(self, count: int, allow_draw: bool) -> Optional[int]:
        while True:
            try:
                raw = input("Enter number: ").strip()
                if allow_draw and raw.lower() in ("d", "draw"):
                    return None
                idx = int(raw)
                if 0 <= idx < count:
                    return idx
            except ValueError:
                pass
            except EOFError:
                return None
            print("Invalid. Try again.")

    def choose_card(self, playable: list[Card], view: PlayerView) -> Optional[Card]:
        if not playable:
            return None

        print("\n--- Your turn ---")
        print("Your hand:", " ".join(str(c) for c in view.my_hand))
        print("Top discard:", view.top_discard)
        if view.active_color is not None:
            print("Color to match:", view.active_color.value)
        if view.pending_draws:
            print(f"Pending penalty: {view.pending_draws} (stack or draw)")
        print("\nPlayable cards:")
        for i, card in enumerate(playable):
            print(f"  {i}: PLAY {card}")
        print("  d: DRAW")

        idx = self._prompt_index(len(playable), allow_draw=True)
        return None if idx is None else playable[idx]

    def choose_wild_color(self, hand: list[Card], view: PlayerView) -> Color:
        colors = Color.playable()
        print("\nChoose a color:")
        for i, color in enumerate(colors):
            print(f"  {i}: {color.value}")
        idx = self._prompt_index(len(colors), allow_draw=False)
        return colors[idx if idx is not None else 0]

    def choose_swap_target(self, view: PlayerView) -> str:
        opponents = [pid for pid in view.player_order if pid != view.player_id]
        print("\nSwap hands with:")
        for i, pid in enumerate(opponents):
            print(f"  {i}: {pid} ({view.num_cards_per_player[pid]} cards)")
        idx = self._prompt_index(len(opponents), allow_draw=False)
        return opponents[idx if idx is not None else 0]
