"""
Session pipelines.

    - manager: create_session_from_folder (ingestion) and chat (query)
    - prompts: Answer prompt template and the no-context sentinel answer
"""

from sessionrag.session.manager import SessionManager, new_session_id
from sessionrag.session.prompts import NO_CONTEXT_ANSWER, build_prompt

__all__ = ["SessionManager", "new_session_id", "NO_CONTEXT_ANSWER", "build_prompt"]
