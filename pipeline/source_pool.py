"""
Source pool: curated outlets with a verified political position.

Positions follow public media-bias ratings (MBFC, AllSides, Décodex,
Ad Fontes) on a 0 (far left) .. 50 (center) .. 100 (far right) scale.
Pure reference data, loaded once at import. The floor-filling step in
enrich.py samples from here when a story lacks sources or a bias group.
"""

from errors import PoolIntegrityError
from models import CuratedSourceProfile, LEFT, CENTER, RIGHT, NEUTRAL, BIASES


def _profiles(bias, rows):
    return tuple(CuratedSourceProfile(name, bias, position, summary)
                 for name, position, summary in rows)


CURATED_SOURCE_POOL = {
    LEFT: _profiles(LEFT, [
        ("lemonde.fr", 35, "Décryptage de fond du Monde sur {topic}."),
        ("theguardian.com", 30, "Regard société civile du Guardian sur {topic}."),
        ("mediapart.fr", 25, "Enquête indépendante de Mediapart autour de {topic}."),
        ("liberation.fr", 28, "Lecture sociale et politique de Libération sur {topic}."),
        ("humanite.fr", 20, "Point de vue syndical de L'Humanité concernant {topic}."),
        ("vox.com", 32, "Explication progressiste de Vox appliquée à {topic}."),
        ("nytimes.com", 38, "Reportage du New York Times consacré à {topic}."),
    ]),
    CENTER: _profiles(CENTER, [
        ("reuters.com", 50, "Dépêche factuelle de Reuters consacrée à {topic}."),
        ("apnews.com", 50, "Synthèse Associated Press sur {topic}."),
        ("afp.com", 50, "Fil d'actualité AFP sur {topic}."),
        ("bbc.com", 48, "Couverture de la BBC sur {topic}."),
        ("politico.eu", 52, "Analyse politique européenne de Politico liée à {topic}."),
        ("axios.com", 50, "Résumé concis d'Axios concernant {topic}."),
        ("francetvinfo.fr", 49, "Traitement du service public franceinfo sur {topic}."),
    ]),
    RIGHT: _profiles(RIGHT, [
        ("lefigaro.fr", 65, "Lecture conservatrice du Figaro sur {topic}."),
        ("wsj.com", 68, "Angle pro-business du Wall Street Journal appliqué à {topic}."),
        ("lesechos.fr", 67, "Analyse économique libérale des Échos au sujet de {topic}."),
        ("economist.com", 63, "Analyse de The Economist portant sur {topic}."),
        ("foxnews.com", 80, "Traitement éditorial conservateur de Fox News autour de {topic}."),
        ("nypost.com", 72, "Couverture du New York Post sur {topic}."),
        ("lopinion.fr", 66, "Éclairage libéral de L'Opinion sur {topic}."),
    ]),
    NEUTRAL: _profiles(NEUTRAL, [
        ("who.int", 50, "Données techniques de l'OMS liées à {topic}."),
        ("worldbank.org", 50, "Lecture macro-économique de la Banque mondiale autour de {topic}."),
        ("oecd.org", 50, "Étude comparative de l'OCDE au sujet de {topic}."),
        ("un.org", 50, "Position institutionnelle de l'ONU sur {topic}."),
        ("eurostat.ec.europa.eu", 50, "Statistiques européennes d'Eurostat sur {topic}."),
    ]),
}

DEFAULT_POSITION_BY_BIAS = {
    LEFT: 35,
    CENTER: 50,
    NEUTRAL: 50,
    RIGHT: 65,
}

# Order used when padding a story up to the floor
BIAS_ROTATION_ORDER = (LEFT, RIGHT, CENTER, NEUTRAL)

# Longest names first so a specific outlet wins over a short generic one
_LOOKUP_ORDER = sorted(
    (p for bias in BIASES for p in CURATED_SOURCE_POOL[bias]),
    key=lambda p: len(p.name), reverse=True)

_MIN_REVERSE_MATCH = 3


def _matches(pool_name, query):
    if pool_name == query or pool_name in query:
        return True
    return len(query) >= _MIN_REVERSE_MATCH and query in pool_name


def find_known_source_profile(raw_name):
    """Find a curated profile by name or domain, tolerant of www./spacing variants."""
    if not isinstance(raw_name, str):
        return None
    normalized = raw_name.lower().strip()
    if not normalized:
        return None
    compact = "".join(normalized.split())

    for profile in _LOOKUP_ORDER:
        pool_name = profile.name.lower()
        if _matches(pool_name, normalized) or (compact != normalized and _matches(pool_name, compact)):
            return profile
    return None


def get_sources_by_bias(bias):
    return list(CURATED_SOURCE_POOL.get(bias, ()))


def default_position(bias):
    return DEFAULT_POSITION_BY_BIAS.get(bias, 50)


def check_pool_integrity(pool=None):
    """Every bias bucket must be non-empty and positions must agree with bias."""
    pool = CURATED_SOURCE_POOL if pool is None else pool
    for bias in BIASES:
        profiles = pool.get(bias) or ()
        if not profiles:
            raise PoolIntegrityError("No curated sources for bias '{}'".format(bias))
        for p in profiles:
            if p.bias != bias:
                raise PoolIntegrityError("{} filed under '{}' but tagged '{}'".format(
                    p.name, bias, p.bias))
            if not 0 <= p.position <= 100:
                raise PoolIntegrityError("{} position {} out of range".format(p.name, p.position))
            if bias == LEFT and p.position >= 50 or bias == RIGHT and p.position <= 50:
                raise PoolIntegrityError("{} position {} contradicts bias '{}'".format(
                    p.name, p.position, bias))
            if "{topic}" not in p.default_summary:
                raise PoolIntegrityError("{} default summary lacks a {{topic}} slot".format(p.name))


check_pool_integrity()
