"""Statement search — query normalization, ranking, results box and location picker.

Queries are normalized toward canonical statement ids:

    "7"      -> "MAG-007"
    "MAG 7"  -> "MAG-007"
    "mag-7"  -> "MAG-007"
    "eye"    -> "EYE"      (substring match only)

Statement-id matches win. Place names are only searched when no statement
id matches.
"""

import logging
import re
from collections import defaultdict
from typing import Callable

from statement_map.canvas import DeferredCalls
from statement_map.config import SearchConfig
from statement_map.models import Location, SearchResult

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _esc(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;").replace("'", "&#39;")


def normalize_query(raw: str, prefix: str = "MAG", pad_width: int = 3) -> str:
    """Turn user input into a canonical statement id, or upper-case it verbatim."""
    term = raw.strip()
    p = re.escape(prefix)

    m = (
        re.fullmatch(r"(\d+)", term)
        or re.fullmatch(rf"{p}\s*(\d+)", term, re.IGNORECASE)
        or re.fullmatch(rf"{p}-(\d+)", term, re.IGNORECASE)
    )
    if m:
        return f"{prefix}-{m.group(1).zfill(pad_width)}"
    return term.upper()


def statement_number(statement: str, prefix: str = "MAG") -> int:
    """Numeric suffix of a statement id; 0 when there is none."""
    m = _LEADING_INT.match(statement.replace(f"{prefix}-", ""))
    return int(m.group(1)) if m else 0


def group_by_statement(locations: list[Location]) -> dict[str, list[Location]]:
    groups: dict[str, list[Location]] = defaultdict(list)
    for loc in locations:
        groups[loc.statement].append(loc)
    return dict(groups)


def _result(statement: str, shown: list[Location], group_size: int) -> SearchResult:
    first = shown[0]
    return SearchResult(
        statement=statement,
        place=first.place or "Unknown Location",
        entity=first.entity or "Unknown",
        summary=first.summary or "",
        locations=shown,
        has_multiple_locations=group_size > 1,
    )


def search_locations(
    locations: list[Location],
    raw: str,
    prefix: str = "MAG",
    pad_width: int = 3,
) -> list[SearchResult]:
    """Ranked results for `raw`, ascending by statement number."""
    term = raw.strip()
    if not term:
        return []

    normalized = normalize_query(term, prefix, pad_width)
    original = term.upper()
    groups = group_by_statement(locations)

    results = [
        _result(statement, locs, len(locs))
        for statement, locs in groups.items()
        if normalized in statement.upper() or original in statement.upper()
    ]

    if not results:
        # Place-name fallback; one hit per statement, carrying only the matching location.
        seen: set[str] = set()
        for statement, locs in groups.items():
            for loc in locs:
                if statement in seen:
                    break
                if original in (loc.place or "").upper():
                    results.append(_result(statement, [loc], len(locs)))
                    seen.add(statement)

    results.sort(key=lambda r: statement_number(r.statement, prefix))
    logger.debug("Search %r -> %r: %d results", raw, normalized, len(results))
    return results


# --- Results box ---


class SearchStatus:
    HIDDEN = "hidden"
    LOADING = "loading"
    EMPTY = "empty"
    RESULTS = "results"


class StatementSearch:
    """State of the search box, its results dropdown and the location picker.

    `on_jump(location, statement)` is called when the user settles on one
    location, either directly or through the picker.
    """

    def __init__(
        self,
        on_jump: Callable[[Location, str], None],
        clock: DeferredCalls | None = None,
        config: SearchConfig | None = None,
    ) -> None:
        self.on_jump = on_jump
        self.clock = clock or DeferredCalls()
        self.config = config or SearchConfig()
        self.locations: list[Location] = []
        self.query = ""
        self.status = SearchStatus.HIDDEN
        self.results: list[SearchResult] = []
        self.visible = False
        self.picker: SearchResult | None = None
        self._pending_hide = None

    def set_locations(self, locations: list[Location]) -> None:
        self.locations = locations

    @property
    def ready(self) -> bool:
        return bool(self.locations)

    @property
    def clear_button_visible(self) -> bool:
        return bool(self.query.strip())

    def input(self, text: str) -> list[SearchResult]:
        self.query = text
        term = text.strip()

        if not self.ready:
            logger.warning("Search: no locations loaded yet")
            self.status = SearchStatus.LOADING
            self.results = []
            self.visible = True
            return []

        if not term:
            self.status = SearchStatus.HIDDEN
            self.results = []
            self.visible = False
            return []

        self.results = search_locations(
            self.locations, term, self.config.id_prefix, self.config.pad_width,
        )
        self.status = SearchStatus.RESULTS if self.results else SearchStatus.EMPTY
        self.visible = True
        return self.results

    def focus(self) -> None:
        if self._pending_hide is not None:
            self.clock.cancel(self._pending_hide)
            self._pending_hide = None
        if self.status != SearchStatus.HIDDEN:
            self.visible = True

    def blur(self) -> None:
        """Hide results after a short delay so a click on a result still lands."""
        self._pending_hide = self.clock.call_later(self.config.blur_hide_delay, self._hide)

    def _hide(self) -> None:
        self.visible = False
        self._pending_hide = None

    def escape(self) -> None:
        self.picker = None
        if self.query:
            self.clear()

    def clear(self) -> None:
        self.query = ""
        self.results = []
        self.status = SearchStatus.HIDDEN
        self.visible = False

    # Choosing

    def choose(self, result: SearchResult) -> None:
        """Single location: jump. Several: open the picker and wait."""
        if len(result.locations) == 1:
            self.on_jump(result.locations[0], result.statement)
            return
        self.visible = False
        self.picker = result

    def choose_location(self, index: int) -> None:
        if self.picker is None:
            raise ValueError("No location picker is open")
        result = self.picker
        if not 0 <= index < len(result.locations):
            raise ValueError(f"Location index {index} out of range for {result.statement}")
        self.picker = None
        self.clear()
        self.on_jump(result.locations[index], result.statement)

    def dismiss_picker(self) -> None:
        self.picker = None

    # Markup

    def render_results(self) -> str:
        if self.status == SearchStatus.LOADING:
            return '<div class="no-results">Loading statement data...</div>'
        if self.status == SearchStatus.EMPTY:
            return '<div class="no-results">No statements found matching your search</div>'
        if self.status == SearchStatus.HIDDEN:
            return ""

        parts = []
        for i, r in enumerate(self.results):
            count = len(r.locations)
            badge = f' <span class="location-count-badge">{count}</span>' if count > 1 else ""
            hint = (
                f'<div class="multi-location-hint">Click to choose from {count} locations</div>'
                if count > 1 else ""
            )
            parts.append(
                f'<div class="search-result-item" data-result="{i}">'
                f'<div class="result-title">{_esc(r.statement)}{badge}</div>'
                f'<div class="result-subtitle"><span>{_esc(r.place)}</span>'
                f'<span class="result-entity">{_esc(r.entity)}</span></div>'
                f"{hint}</div>"
            )
        return "".join(parts)

    def render_picker(self) -> str:
        if self.picker is None:
            return ""
        result = self.picker
        limit = self.config.summary_preview_chars
        options = []
        for i, loc in enumerate(result.locations):
            summary = loc.summary or ""
            preview = summary[:limit] + ("..." if len(summary) > limit else "")
            options.append(
                f'<div class="location-option" data-index="{i}">'
                f'<div class="location-option-header"><span class="location-number">{i + 1}</span>'
                f'<span class="location-type">{_esc(loc.location_type or "Location")}</span></div>'
                f'<div class="location-place">{_esc(loc.place or "")}</div>'
                f'<div class="location-summary">{_esc(preview)}</div></div>'
            )
        return (
            '<div class="location-picker">'
            f'<div class="location-picker-header"><h4>{_esc(result.statement)} - Choose Location</h4></div>'
            f'<div class="location-picker-subtitle">This statement references '
            f"{len(result.locations)} locations. Select one to view:</div>"
            f'<div class="location-picker-list">{"".join(options)}</div></div>'
        )
