from __future__ import annotations

import random


DEFAULT_WORDS: list[str] = [
    # Basics
    "jabłko", "komputer", "samolot", "pianino", "słońce", "ocean", "książka",
    "gitara", "parasolka", "czekolada", "telefon", "rower", "księżyc", "kwiat",
    "lodówka", "zegarek", "lampa", "krzesło", "kawa", "pizza", "motyl", "drzewo",
    # Animals
    "kot", "pies", "ptak", "ryba", "wąż", "żaba", "mysz", "koń", "krowa",
    "świnia", "owca", "koza", "kura", "kogut", "kaczka", "gęś", "indyk",
    "królik", "jeż", "wiewiórka", "lis", "wilk", "niedźwiedź", "łoś", "jeleń",
    "sarna", "dzik", "zając", "bóbr", "wydra",
    # Fruit and vegetables
    "gruszka", "śliwka", "czereśnia", "wiśnia", "truskawka", "malina", "jeżyna",
    "marchewka", "ziemniak", "ogórek", "pomidor", "cebula", "czosnek",
    # Materials
    "papier", "glina", "drewno", "metal", "kamień", "szkło", "ceramika",
]

CUSTOM_WORD_MIN_LENGTH = 3
CUSTOM_WORD_MAX_LENGTH = 20


def is_valid_custom_word(word: str) -> bool:
    return CUSTOM_WORD_MIN_LENGTH <= len(word) <= CUSTOM_WORD_MAX_LENGTH


def normalize_custom_words(raw: list) -> list[str]:
    """Strip, drop empties and de-duplicate, keeping first occurrence order."""
    words: list[str] = []
    for w in raw:
        if not isinstance(w, str):
            continue
        w = w.strip()
        if w and w not in words:
            words.append(w)
    return words


def pick_word(words: list[str], rng: random.Random | None = None) -> str:
    return (rng or random).choice(words)
