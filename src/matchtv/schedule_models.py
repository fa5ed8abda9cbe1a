# --- Schedule Data Structures ---
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Match:
    """One televised football match as listed on tvmatchen.nu."""
    name: str       # e.g. "Arsenal - Chelsea"
    league: str     # canonical league label, e.g. "Premier League"
    channel: str    # e.g. "Viaplay", may be empty
    time: str       # display time as listed, e.g. "13:30"

    def __str__(self) -> str:
        return f"{self.time} {self.name} ({self.league}, {self.channel})"

    def to_dict(self) -> dict:
        data = asdict(self)
        data['display'] = str(self)
        return data


# Day identifier (e.g. "2023-10-21") -> matches in page order.
# A Schedule is built once per refresh and never modified afterwards.
Schedule = dict[str, tuple[Match, ...]]
