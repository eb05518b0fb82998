"""
Prompt template for answering a question from retrieved context.
"""

ANSWER_PROMPT = """Answer the question based only on the context.

Context:
{context}

Question:
{question}

Answer concisely and accurately in three sentences or less."""

NO_CONTEXT_ANSWER = "No relevant context found in the document to answer your question."

CONTEXT_SEPARATOR = "\n\n"


def build_context(texts: list[str]) -> str:
    """Join retrieved chunk texts, in retrieval order, separated by a blank line."""
    return CONTEXT_SEPARATOR.join(texts)


def build_prompt(context: str, question: str) -> str:
    """Fill the answer template with the context block and the question."""
    return ANSWER_PROMPT.format(context=context, question=question)
