"""
StageNotes – SQLAlchemy ORM models package.

Imports all model classes so the app can discover them through a single
``from stagenotes.models import *`` import before ``create_all``.
"""

from stagenotes.models.board import Board          # noqa: F401
from stagenotes.models.note import Note, NoteType  # noqa: F401
from stagenotes.models.vote import Vote            # noqa: F401
