from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..game.assignment import build_word_pool
from ..game.words import DEFAULT_WORDS

bp = Blueprint("words", __name__)


@bp.get("/words")
def get_words():
    # Custom words (optional): comma separated, or multiple words[] query params
    custom_words: list[str] = []
    if request.args.get("custom"):
        custom_words.extend([w.strip() for w in request.args.get("custom", "").split(",") if w.strip()])
    custom_words.extend([w.strip() for w in request.args.getlist("words[]") if w.strip()])

    pool = build_word_pool(custom_words)
    return jsonify({"builtin": len(DEFAULT_WORDS), "words": pool})
