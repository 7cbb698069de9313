"""In-memory rating index: user -> items and item -> users views of one rating set."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

import pandas as pd

from ..utils import parse_finite_float


logger = logging.getLogger(__name__)

# Any first field starting with userId / user_id, as in `userId,itemId,rating`.
_HEADER_RE = re.compile(r"^user_?id", re.IGNORECASE)
# Replacement character left by decoding with errors="replace".
_UNDECODABLE = "\ufffd"
_EMPTY: Mapping[str, float] = MappingProxyType({})

N_FIELDS = 3


@dataclass(frozen=True)
class Rating:
    user_id: str
    item_id: str
    value: float


@dataclass(frozen=True)
class MalformedRow:
    line_number: int
    raw_text: str
    reason: str


def is_header(first_field: str) -> bool:
    return bool(_HEADER_RE.match(first_field.strip()))


def is_ignored(row: Sequence[str]) -> bool:
    """Empty rows, `#` comments and header rows carry no rating."""
    if not row or all(not str(f).strip() for f in row):
        return True
    first = str(row[0]).strip()
    return first.startswith("#") or is_header(first)


def split_line(line: str, delimiter: str = ",") -> list[str]:
    """Split a trimmed line into fields, dropping trailing empty fields."""
    fields = line.strip().split(delimiter)
    while len(fields) > 1 and fields[-1] == "":
        fields.pop()
    return fields


def parse_row(fields: Sequence[str]) -> Rating | str:
    """Parse split fields into a Rating, or return the reason they are malformed."""
    if len(fields) != N_FIELDS:
        return f"expected {N_FIELDS} fields, got {len(fields)}"
    user, item, rating_text = (str(f).strip() for f in fields)
    if _UNDECODABLE in user or _UNDECODABLE in item or _UNDECODABLE in rating_text:
        return "undecodable bytes"
    value = parse_finite_float(rating_text)
    if value is None:
        return f"invalid rating {rating_text!r}"
    return Rating(user_id=user, item_id=item, value=value)


@dataclass(frozen=True)
class RatingStore:
    """Read-only rating set indexed both by user and by item.

    Build it with `RatingStore.build` (raw text lines) or `RatingStore.from_rows`
    (already split triples). Both indexes always hold the same (user, item, value)
    triples; a later rating for the same pair replaces the earlier one.
    """

    user_ratings: dict[str, dict[str, float]] = field(default_factory=dict)
    item_ratings: dict[str, dict[str, float]] = field(default_factory=dict)
    skipped: tuple[MalformedRow, ...] = ()

    @classmethod
    def build(cls, lines: Iterable[str], *, delimiter: str = ",") -> "RatingStore":
        """Build a store from delimited text lines (`userId,itemId,rating`).

        Lines are numbered from 1 and handed to `from_rows` as split fields.
        """
        return cls.from_rows((split_line(line, delimiter) for line in lines), delimiter=delimiter)

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[str]], *, delimiter: str = ",") -> "RatingStore":
        """Build a store from (user, item, rating_text) rows; row numbers start at 1.

        Empty rows, `#` comments and header rows are ignored. Rows with the
        wrong field count, undecodable bytes or a non-finite rating are skipped
        and recorded on `skipped`.
        """
        ratings: list[Rating] = []
        skipped: list[MalformedRow] = []
        for row_number, row in enumerate(rows, start=1):
            if is_ignored(row):
                continue
            parsed = parse_row(row)
            if isinstance(parsed, str):
                skipped.append(_skip(row_number, delimiter.join(str(f) for f in row), parsed))
                continue
            ratings.append(parsed)
        return cls.from_ratings(ratings, skipped=skipped)

    @classmethod
    def from_ratings(
        cls,
        ratings: Iterable[Rating],
        *,
        skipped: Iterable[MalformedRow] = (),
    ) -> "RatingStore":
        user_ratings: dict[str, dict[str, float]] = {}
        item_ratings: dict[str, dict[str, float]] = {}
        for r in ratings:
            user_ratings.setdefault(r.user_id, {})[r.item_id] = float(r.value)
            item_ratings.setdefault(r.item_id, {})[r.user_id] = float(r.value)

        store = cls(user_ratings=user_ratings, item_ratings=item_ratings, skipped=tuple(skipped))
        logger.info(
            "RatingStore built: users=%d items=%d ratings=%d skipped=%d",
            len(user_ratings),
            len(item_ratings),
            store.n_ratings,
            len(store.skipped),
        )
        return store

    @property
    def n_ratings(self) -> int:
        return sum(len(items) for items in self.user_ratings.values())

    def __len__(self) -> int:
        return self.n_ratings

    def has_user(self, user_id: str) -> bool:
        return user_id in self.user_ratings

    def ratings_of(self, user_id: str) -> Mapping[str, float]:
        """item -> rating for `user_id` (empty for unknown users)."""
        items = self.user_ratings.get(user_id)
        return _EMPTY if items is None else MappingProxyType(items)

    def raters_of(self, item_id: str) -> Mapping[str, float]:
        """user -> rating for `item_id` (empty for unknown items)."""
        users = self.item_ratings.get(item_id)
        return _EMPTY if users is None else MappingProxyType(users)

    def known_users(self) -> frozenset[str]:
        return frozenset(self.user_ratings)

    def known_items(self) -> frozenset[str]:
        return frozenset(self.item_ratings)

    def to_frame(self) -> pd.DataFrame:
        """Long-format ratings table (userId, itemId, rating) sorted by ids."""
        rows = [
            (user, item, value)
            for user, items in self.user_ratings.items()
            for item, value in items.items()
        ]
        df = pd.DataFrame(rows, columns=["userId", "itemId", "rating"])
        df["rating"] = df["rating"].astype("float64")
        return df.sort_values(["userId", "itemId"], kind="mergesort").reset_index(drop=True)


def _skip(line_number: int, raw_text: str, reason: str) -> MalformedRow:
    logger.warning("Skipping malformed line %d (%s): %s", line_number, reason, raw_text)
    return MalformedRow(line_number=line_number, raw_text=raw_text, reason=reason)
