from dataclasses import dataclass


@dataclass
class NoteMeta:
    id: str
    title: str
    created_at: int  # ms epoch
    updated_at: int


@dataclass
class Note:
    id: str
    title: str
    content: str  # source Markdown, représentation de référence
    rendered_body: str  # HTML assaini, dérivé de content à chaque écriture
    created_at: int
    updated_at: int

    def meta(self) -> NoteMeta:
        return NoteMeta(
            id=self.id,
            title=self.title,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
