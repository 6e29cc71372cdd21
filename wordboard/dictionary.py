from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Set, Union

logger = logging.getLogger(__name__)

# Fallback word list used when no dictionary file is configured or found.
DEFAULT_WORDS = {
    # Common short words (2-3 letters)
    'AA','AB','AD','AE','AG','AH','AI','AL','AM','AN','AR','AS','AT','AW','AX','AY',
    'BA','BE','BI','BO','BY',
    'DO','ED','EF','EH','EL','EM','EN','ER','ES','ET','EX',
    'FA','GO','HA','HE','HI','HM','HO','ID','IF','IN','IS','IT','JO','KA','KI','LA','LI','LO',
    'MA','ME','MI','MM','MO','MU','MY','NA','NE','NO','NU','OD','OE','OF','OH','OI','OM','ON','OP','OR','OS','OW','OX','OY',
    'PA','PE','PI','QI','RE','SH','SI','SO','TA','TI','TO','UH','UM','UN','UP','US','UT','WE','WO','XI','XU','YA','YE','YO',
    # Some 4-7 letter common words
    'HELLO','WORLD','SCRABBLE','TILE','BOARD','WORD','PLAY','GAME','POINT','QUIZ','JAZZ','FUZZ','PUZZLE','BLANK',
    'CAT','DOG','FISH','BIRD','HOUSE','MOUSE','TABLE','CHAIR','ZOO','ECHO','RHYTHM',
}

class DictionaryService:
    """Membership test over an uppercase word set; the engine sees it as a plain container."""

    def __init__(self, words: Optional[Iterable[str]] = None):
        self._words: Set[str] = {w.strip().upper() for w in (words if words is not None else DEFAULT_WORDS) if w.strip()}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> DictionaryService:
        # One word per line; blank lines ignored
        with open(path, "r", encoding="utf-8") as f:
            service = cls(line for line in f)
        logger.info("Dictionary loaded: %d words from %s", len(service), path)
        return service

    @classmethod
    def load(cls, path: Optional[Union[str, Path]]) -> DictionaryService:
        if path and Path(path).is_file():
            return cls.from_file(path)
        logger.warning("Dictionary file %s not found. Using built-in word list.", path)
        return cls()

    def is_valid(self, word: str) -> bool:
        if not word:
            return False
        return word.upper() in self._words

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.is_valid(word)

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)
