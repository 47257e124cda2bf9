# conllview/core/data_structures.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, Mapping, Optional

# Ключ в FEATS/MISC, которым внешняя разметка помечает токены для подсветки
HIGHLIGHT_KEY = "highlight"


def _nullable(value: Any) -> Optional[str]:
    # В CoNLL "_" означает отсутствие значения
    if value is None or value == "_":
        return None
    return str(value)


def _has_highlight(column: Optional[Mapping[str, Any]]) -> bool:
    if not column:
        return False
    return any(str(key).lower() == HIGHLIGHT_KEY for key in column)


class Token(BaseModel):
    """
    Аннотированный токен предложения (только чтение).
    Несет два слоя разметки: поверхностный (HEAD/DEPREL) и проективный (PHEAD/PDEPREL).
    """
    model_config = ConfigDict(frozen=True)

    id: int  # 1-based index in sentence
    form: str
    lemma: Optional[str] = None
    upos: Optional[str] = None
    xpos: Optional[str] = None

    head_id: Optional[int] = None  # 0 for ROOT, None if absent
    rel: Optional[str] = None

    # Альтернативный (проективный) слой, есть только в CoNLL-X
    phead_id: Optional[int] = None
    prel: Optional[str] = None

    highlight: bool = False
    misc: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode='after')
    def check_heads(self):
        for name in ("head_id", "phead_id"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"Invalid {name} for token '{self.form}': {value}")
        return self

    @classmethod
    def from_conllu(cls, token: Mapping[str, Any]) -> "Token":
        """
        Конвертирует токен библиотеки conllu (dict-like) в Token.
        Колонки phead/pdeprel присутствуют только при разборе в режиме CoNLL-X.
        """
        misc = token.get("misc") or {}
        return cls(
            id=token["id"],
            form=token["form"] or "",
            lemma=_nullable(token.get("lemma")),
            upos=_nullable(token.get("upos")),
            xpos=_nullable(token.get("xpos")),
            head_id=token.get("head"),
            rel=_nullable(token.get("deprel")),
            phead_id=token.get("phead"),
            prel=_nullable(token.get("pdeprel")),
            highlight=_has_highlight(token.get("feats")) or _has_highlight(misc),
            misc={str(k): "" if v is None else str(v) for k, v in misc.items()},
        )
