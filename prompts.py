"""
Prompt text for the two LLM jobs: tile synthesis and tile artwork.
"""

import re

from config import DEFAULT_CATEGORY


IMAGE_STYLE = (
    "Premium conceptual illustration for a PRISM news tile. Modern editorial satire style, "
    "blending traditional ink techniques with surrealist metaphors.")
IMAGE_SCENE = (
    "Scene direction: visual metaphors and giant objects rather than literal people. "
    "Surrealist composition playing with scale and gravity, elegant 3:4 portrait framing, "
    "layered depth, subtle newsprint textures, generous negative space.")
IMAGE_ART = (
    "Art direction: expressive black ink linework with selective watercolor washes. "
    "Symbolism (chess pieces, sinking ships, balancing acts, clockworks, labyrinths) "
    "stands for the conflict. No literal depictions of meetings.")
IMAGE_TONE = (
    "Tone: witty, metaphorical, critical but elegant. Palette: muted newsprint beige and "
    "charcoal blacks with one or two vivid accents echoing the topic.")
IMAGE_QUALITY = (
    "Quality: ultra high resolution, crisp edges, no typography, no captions, no logos, "
    "no UI elements, no photographic realism. Avoid 3D renders, gore, watermarks, "
    "offensive caricature, handshake scenes and men in suits.")

_SUBJECT_RE = re.compile(r"Subject focus: (.*?)\.(?: Context and stakes:| Scene direction:)", re.DOTALL)


def build_image_prompt(subject, context="", mood=""):
    """Wrap a subject in the fixed PRISM art direction."""
    parts = [
        IMAGE_STYLE,
        "Subject focus: {}.".format(subject.rstrip(".")),
        "Context and stakes: {}.".format(context.rstrip(".")) if context else "",
        IMAGE_SCENE,
        IMAGE_ART,
        IMAGE_TONE,
        mood,
        IMAGE_QUALITY,
    ]
    return " ".join(p for p in parts if p)


def extract_image_subject(prompt):
    """Return the subject of an already-framed prompt, or the prompt itself."""
    if not prompt or not prompt.startswith(IMAGE_STYLE):
        return prompt
    m = _SUBJECT_RE.search(prompt)
    return m.group(1) if m else prompt


NEWS_SYSTEM = """Nous sommes le {today} et il est {now}.
Tu es le rédacteur en chef de PRISM, une revue de presse qui confronte les points de vue.
Style : incisif, dense, analytique. Explique pourquoi cela compte, pas seulement ce qui s'est passé.
Cherche la friction, la contradiction et l'angle mort. Tout le contenu doit être en FRANÇAIS."""

NEWS_CORPUS = """>>> DÉBUT FLUX SOURCES (RAW MARKDOWN)
{corpus}
>>> FIN FLUX SOURCES

TÂCHE : Synthétise ce flux en une revue de presse.
- Regroupe par sujet, en cherchant les sources qui s'opposent sur un même sujet.
- Pour chaque sujet, cite le maximum de sources distinctes (objectif : 5 à 10).
- Base au moins 90% de ta réponse sur le flux."""

NEWS_TASK = """TÂCHE : {task}"""

NEWS_OUTPUT = """Produis au moins {count} articles distincts.
Retourne UNIQUEMENT un tableau JSON minifié, sans markdown ni commentaire. Chaque élément :
{{"headline": str, "summary": str, "detailedSummary": str, "importance": str, "emoji": str,
"category": str, "publishedAt": str, "imagePrompt": str,
"sentiment": {{"positive": str, "negative": str}},
"sources": [{{"name": domaine, "bias": "left"|"center"|"right", "url": str, "coverageSummary": str}}]}}
Échappe les caractères de contrôle : les retours à la ligne dans les chaînes s'écrivent "\\n"."""


def describe_task(count, query=None, category=None):
    if query:
        return "Identifie les {} actualités les plus pertinentes liées à la recherche : \"{}\".".format(
            count, query)
    if category and category != DEFAULT_CATEGORY:
        return "Identifie les {} actualités les plus importantes dans la catégorie : \"{}\".".format(
            count, category)
    return "Identifie les {} actualités les plus importantes du moment.".format(count)


def build_news_prompt(corpus, task, today, now, count):
    parts = [NEWS_SYSTEM.format(today=today, now=now)]
    if corpus:
        parts.append(NEWS_CORPUS.format(corpus=corpus))
    else:
        parts.append(NEWS_TASK.format(task=task))
    parts.append(NEWS_OUTPUT.format(count=count))
    return "\n\n".join(parts)
