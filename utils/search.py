# Copyright (C) 2026 grodz
#
# This file is part of Pizzabox.
#
# Pizzabox is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Song lookup by number or name, with RapidFuzz edit distance as the fallback.

Resolution order (first hit wins):
1. Index: "12" (or "12 songs") selects the 12th file in scan order (1-based)
2. Exact: display name equals the query (case-insensitive, trimmed)
3. Fuzzy: smallest Levenshtein distance, accepted only up to FUZZY_MATCH_MAX_DISTANCE
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from rapidfuzz.distance import Levenshtein

from config.audio_settings import FUZZY_MATCH_MAX_DISTANCE
from config.messages import MESSAGES
from core.track import AudioFile

_LEADING_INTEGER = re.compile(r'\s*([+-]?[0-9]+)')


class MatchKind(Enum):
    INDEX = "index"
    EXACT = "exact"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolve_song(): either a selected file or an error message.

    distance is only set for FUZZY matches.
    """

    selected: Optional[AudioFile] = None
    match_kind: Optional[MatchKind] = None
    distance: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.selected is not None


def normalize(text: str) -> str:
    """Trim surrounding whitespace and lowercase."""
    return text.strip().lower()


def parse_index(query: str) -> Optional[int]:
    """
    Return the integer the query starts with, or None.

    Trailing text is ignored: "2abc" and "12 songs" are indexes 2 and 12.
    """
    match = _LEADING_INTEGER.match(query)
    if match:
        return int(match.group(1))
    return None


def resolve_song(query: str, files: Sequence[AudioFile]) -> Resolution:
    """
    Pick one file from files for a user query.

    Args:
        query: Raw user input ("12", "hopes and dreams", "hopes n dreams")
        files: Files in scan order (the same order /playlist shows)

    Returns:
        Resolution with selected set, or with error set to a user-facing message
    """
    index = parse_index(query)
    if index is not None:
        if 1 <= index <= len(files):
            return Resolution(selected=files[index - 1], match_kind=MatchKind.INDEX)
        return Resolution(error=MESSAGES['invalid_index'].format(number=index, total=len(files)))

    wanted = normalize(query)
    names = [normalize(f.display_name) for f in files]

    for audio_file, name in zip(files, names):
        if name == wanted:
            return Resolution(selected=audio_file, match_kind=MatchKind.EXACT)

    best: Optional[AudioFile] = None
    best_distance: Optional[int] = None
    for audio_file, name in zip(files, names):
        distance = Levenshtein.distance(wanted, name)
        # Strict < keeps the first file on ties
        if best_distance is None or distance < best_distance:
            best, best_distance = audio_file, distance

    if best is not None and best_distance <= FUZZY_MATCH_MAX_DISTANCE:
        return Resolution(selected=best, match_kind=MatchKind.FUZZY, distance=best_distance)

    return Resolution(error=MESSAGES['no_match'].format(query=query.strip()))
