import secrets
import string
import re
from datetime import datetime, timezone

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def generate_password():
    adjectives = ["Bella", "Clara", "Viva", "Sereno", "Doce", "Lumi", "Aura", "Flor", "Pura", "Nova"]
    nouns = ["Pele", "Rosto", "Brilho", "Toque", "Essencia", "Harmonia", "Leveza", "Luz", "Vigor", "Frescor"]

    adj = secrets.choice(adjectives)
    noun = secrets.choice(nouns)
    number = secrets.randbelow(1000)

    return f"{adj}-{noun}-{number:03d}"

def generate_slug(name: str) -> str:
    slug = name.lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'\s+', '-', slug)
    slug = slug.strip('-') or "clinica"
    # Random suffix keeps slugs unique across workspaces with the same name
    suffix = ''.join(secrets.choice(string.digits) for i in range(4))
    return f"{slug}-{suffix}"
