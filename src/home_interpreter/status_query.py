"""状态查询分类。

每种语言维护有序的正则分层：房间状态层先于通用状态层，
层内按列表顺序首个命中生效。都不命中时退化为关键词判断。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from home_interpreter.config import DEFAULT_CONFIG, EngineConfig
from home_interpreter.lexicon import contains_term
from home_interpreter.models import Language, QueryType, StatusQuery
from home_interpreter.text import normalize

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = Language.EN

_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "`": "'"})
_TRAILING_PUNCT = " ?!.¿¡"


@dataclass(frozen=True)
class StatusLexicon:
    """单一语言的状态查询模式与关键词。"""

    language: Language
    room_status_patterns: tuple[re.Pattern[str], ...]
    status_patterns: tuple[re.Pattern[str], ...]
    strong_keywords: tuple[str, ...]
    status_keywords: tuple[str, ...]
    room_separators: tuple[str, ...]
    device_words: str
    generic_device_words: tuple[str, ...]
    room_words: tuple[str, ...]
    articles: str


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


ENGLISH = StatusLexicon(
    language=Language.EN,
    room_status_patterns=_compile(
        r"^(?:show|list|display|what'?s|what is|what are)\s+(?:me\s+)?(?:all\s+)?(?:the\s+)?(?:devices|things)\s+in\s+(?:the\s+)?(?P<room>.+)$",
        r"\b(?:status|state)\s+(?:of\s+)?(?:all\s+)?(?:the\s+)?(?:devices\s+)?in\s+(?:the\s+)?(?P<room>.+)$",
        r"^(?:tell me about|show me about|what about)\s+(?:the\s+)?(?P<room>.+?\s+room)$",
    ),
    status_patterns=_compile(
        r"\b(?:what'?s|what is|show me|tell me|check|get|display)\s+(?:the\s+)?(?:status|state)\s+of\s+(?:the\s+)?(?P<target>.+)$",
        r"^(?:status|state)\s+(?:of\s+)?(?:the\s+)?(?P<target>.+)$",
        r"^(?:how|what)\s+(?:is|are)\s+(?:the\s+)?(?P<target>.+?)(?:\s+doing|\s+now)?$",
        r"^(?:is|are)\s+(?:the\s+)?(?P<target>.+?)\s+(?:on|off|open|closed|locked|unlocked|running|playing)$",
        r"^(?:show|list|display)\s+(?:me\s+)?(?:all\s+)?(?:the\s+)?(?P<target>.+?)(?:\s+in\s+(?:the\s+)?(?P<room>.+))?$",
        r"^(?:tell me about|show me about|what about)\s+(?:the\s+)?(?P<target>.+)$",
    ),
    strong_keywords=("status", "what's", "whats", "what is", "show me"),
    status_keywords=("status", "state", "how", "what", "show", "list", "check"),
    room_separators=(" in the ", " in "),
    device_words=r"lights?|lamps?|bulbs?|devices?|thermostats?|sensors?|locks?|fans?|speakers?|sockets?|plugs?|outlets?|curtains?|blinds|heating|tv",
    generic_device_words=("devices", "device", "things", "everything"),
    room_words=("room", "kitchen", "bedroom", "bathroom", "living", "dining", "office", "garden", "garage", "hallway", "basement", "attic", "balcony"),
    articles=r"the",
)

SWEDISH = StatusLexicon(
    language=Language.SV,
    room_status_patterns=_compile(
        r"^(?:visa|lista|vad är|vad finns)\s+(?:mig\s+)?(?:alla\s+)?(?:enheter|enheterna|saker|grejer|prylar)\s+i\s+(?P<room>.+)$",
        r"\b(?:status|tillstånd|tillståndet)\s+(?:på|för)\s+(?:alla\s+)?(?:enheter\s+)?i\s+(?P<room>.+)$",
    ),
    status_patterns=_compile(
        r"\b(?:vad är|visa|visa mig|berätta|kolla)\s+(?:status|statusen|tillstånd|tillståndet)\s+(?:på|för|av)\s+(?P<target>.+)$",
        r"^(?:status|tillstånd)\s+(?:på|för)\s+(?P<target>.+)$",
        r"^(?:hur|vad)\s+(?:är|har)\s+(?P<target>.+?)(?:\s+det|\s+nu)?$",
        r"^(?:är|har)\s+(?P<target>.+?)\s+(?:på|av|tänd|tända|släckt|släckta|öppen|öppna|stängd|stängda|låst|olåst)$",
        r"^(?:visa|lista|visa mig)\s+(?:mig\s+)?(?:alla\s+)?(?P<target>.+?)(?:\s+i\s+(?P<room>.+))?$",
    ),
    strong_keywords=("status", "statusen", "tillstånd", "vad är", "visa mig"),
    status_keywords=("status", "tillstånd", "hur", "vad", "visa", "lista", "kolla"),
    room_separators=(" i ",),
    device_words=r"lampor(?:na)?|lampan?|ljus(?:et)?|belysning(?:en)?|enheter(?:na)?|termostat(?:en)?|sensor(?:er|n)?|lås(?:et)?|fläkt(?:en|ar)?|högtalare(?:n)?|uttag(?:et)?|gardiner(?:na)?|tv",
    generic_device_words=("enheter", "enheterna", "saker", "allt"),
    room_words=("rum", "rummet", "vardagsrum", "kök", "sovrum", "badrum", "kontor", "trädgård", "hall", "källare", "matsal", "garage"),
    articles=r"den|det|de",
)

FRENCH = StatusLexicon(
    language=Language.FR,
    room_status_patterns=_compile(
        r"^(?:montre|montre-moi|liste|affiche|quel est|quels sont)\s+(?:moi\s+)?(?:tous\s+|toutes\s+)?(?:les\s+)?(?:appareils|dispositifs)\s+(?:dans|de)\s+(?:le\s+|la\s+|les\s+|l')?(?P<room>.+)$",
        r"\b(?:statut|état)\s+(?:de|des)\s+(?:tous\s+)?(?:les\s+)?(?:appareils\s+)?dans\s+(?:le\s+|la\s+|les\s+|l')?(?P<room>.+)$",
    ),
    status_patterns=_compile(
        r"\b(?:quel est|qu'est-ce que|montre|montre-moi|dis-moi|vérifie|affiche)\s+(?:le\s+|l')?(?:statut|état)\s+(?:de la|de l'|du|des|de)\s*(?P<target>.+)$",
        r"^(?:comment)\s+(?:est|sont|va|vont)\s+(?:le|la|les|l')\s*(?P<target>.+?)(?:\s+maintenant)?$",
        r"^(?:est-ce que\s+)?(?:le|la|les|l')\s*(?P<target>.+?)\s+(?:est|sont)\s+(?:allumée?s?|éteinte?s?|ouverte?s?|fermée?s?|verrouillée?s?)$",
        r"^(?:montre|montre-moi|liste|affiche)\s+(?:moi\s+)?(?:tous\s+|toutes\s+)?(?:les\s+)?(?P<target>.+?)(?:\s+dans\s+(?:le\s+|la\s+|les\s+|l')?(?P<room>.+))?$",
    ),
    strong_keywords=("statut", "état", "quel est", "montre-moi"),
    status_keywords=("statut", "état", "comment", "montre", "liste", "vérifie"),
    room_separators=(" dans la ", " dans le ", " dans l'", " dans "),
    device_words=r"lumières?|lampes?|appareils?|thermostats?|capteurs?|serrures?|ventilateurs?|enceintes?|prises?|rideaux|volets|télé|tv",
    generic_device_words=("appareils", "dispositifs", "tout"),
    room_words=("salon", "cuisine", "chambre", "salle de bain", "bureau", "jardin", "garage", "couloir", "salle à manger"),
    articles=r"le|la|les|l'",
)

GERMAN = StatusLexicon(
    language=Language.DE,
    room_status_patterns=_compile(
        r"^(?:zeige|zeig|liste|was ist|was sind)\s+(?:mir\s+)?(?:alle\s+)?(?:geräte|sachen)\s+(?:im|in der|in)\s+(?P<room>.+)$",
        r"\b(?:status|zustand)\s+(?:von|der)\s+(?:allen\s+)?(?:geräten?\s+)?(?:im|in der)\s+(?P<room>.+)$",
    ),
    status_patterns=_compile(
        r"\b(?:was ist|wie ist|zeige|zeig|sage mir|prüfe|zeige mir)\s+(?:der|die|das|den|mir den)?\s*(?:status|zustand)\s+(?:von|der|des)\s+(?:den\s+|dem\s+|der\s+)?(?P<target>.+)$",
        r"^(?:wie|was)\s+(?:ist|sind|geht|gehen)\s+(?:der|die|das|es)\s+(?P<target>.+?)(?:\s+jetzt)?$",
        r"^(?:ist|sind)\s+(?:der|die|das)\s+(?P<target>.+?)\s+(?:an|aus|offen|geschlossen|verschlossen|entsperrt)$",
        r"^(?:zeige|zeig|liste)\s+(?:mir\s+)?(?:alle\s+)?(?P<target>.+?)(?:\s+(?:im|in der)\s+(?P<room>.+))?$",
    ),
    strong_keywords=("status", "zustand", "was ist", "zeige mir"),
    status_keywords=("status", "zustand", "wie", "was", "zeige", "liste", "prüfe"),
    room_separators=(" im ", " in der ", " in "),
    device_words=r"lichter|licht|lampen?|geräte?|thermostate?|sensoren|sensor|schlösser|schloss|ventilatoren|ventilator|lautsprecher|steckdosen?|jalousien?|fernseher",
    generic_device_words=("geräte", "sachen", "alles"),
    room_words=("zimmer", "wohnzimmer", "küche", "schlafzimmer", "badezimmer", "bad", "büro", "garten", "keller", "flur", "esszimmer"),
    articles=r"der|die|das|den|dem",
)

SPANISH = StatusLexicon(
    language=Language.ES,
    room_status_patterns=_compile(
        r"^(?:muestra|muéstrame|lista|cuál es|cuáles son)\s+(?:todos\s+)?(?:los\s+)?(?:dispositivos|aparatos)\s+(?:en|de)\s+(?:el\s+|la\s+|los\s+|las\s+)?(?P<room>.+)$",
        r"\b(?:estado|estatus)\s+(?:de|del)\s+(?:todos\s+)?(?:los\s+)?(?:dispositivos\s+)?en\s+(?:el\s+|la\s+|los\s+|las\s+)?(?P<room>.+)$",
    ),
    status_patterns=_compile(
        r"\b(?:qué es|cuál es|muestra|dime|verifica|muéstrame)\s+(?:el\s+)?(?:estado|estatus)\s+(?:de la|de los|de las|del|de)\s+(?P<target>.+)$",
        r"^(?:cómo|qué tal)\s+(?:está|están|va|van)\s+(?:el|la|los|las)\s+(?P<target>.+?)(?:\s+ahora)?$",
        r"^(?:está|están)\s+(?:el|la|los|las)\s+(?P<target>.+?)\s+(?:encendid[oa]s?|apagad[oa]s?|abiert[oa]s?|cerrad[oa]s?|bloquead[oa]s?|desbloquead[oa]s?)$",
        r"^(?:muestra|lista|muéstrame)\s+(?:todos\s+)?(?:los\s+|las\s+)?(?P<target>.+?)(?:\s+en\s+(?:el\s+|la\s+|los\s+|las\s+)?(?P<room>.+))?$",
    ),
    strong_keywords=("estado", "estatus", "cuál es", "muéstrame"),
    status_keywords=("estado", "estatus", "cómo", "qué", "muestra", "lista", "verifica"),
    room_separators=(" en el ", " en la ", " en "),
    device_words=r"luces|luz|lámparas?|dispositivos?|termostatos?|sensores|sensor|cerraduras?|ventiladores?|altavoces|altavoz|enchufes?|cortinas?|persianas?|televisor|tele",
    generic_device_words=("dispositivos", "aparatos", "todo"),
    room_words=("sala", "salón", "cocina", "dormitorio", "habitación", "baño", "oficina", "jardín", "garaje", "comedor", "pasillo"),
    articles=r"el|la|los|las",
)

STATUS_LEXICONS: dict[Language, StatusLexicon] = {
    lexicon.language: lexicon for lexicon in (ENGLISH, SWEDISH, FRENCH, GERMAN, SPANISH)
}

# 任一语言中表示 "全部" 的词
GLOBAL_WORDS = (
    "all devices", "everything", "all", "alla", "allt", "tout", "tous", "toutes",
    "alles", "alle", "todo", "todos", "tutto", "tutti", "tudo", "todas",
)


def get_status_lexicon(language: Language | str | None) -> StatusLexicon:
    """按语言取状态查询词表，未收录的语言回退到英语。"""
    lang = Language.parse(language)
    if lang is None:
        return STATUS_LEXICONS[DEFAULT_LANGUAGE]
    return STATUS_LEXICONS.get(lang, STATUS_LEXICONS[DEFAULT_LANGUAGE])


def classify(
    text: object,
    language: Language | str | None,
    *,
    config: EngineConfig | None = None,
) -> StatusQuery:
    """对输入做状态查询分类。

    Args:
        text: 原始用户输入
        language: 语言代码
        config: 可选阈值配置

    Returns:
        StatusQuery；不是状态查询时 type 为 None、confidence 为 0
    """
    config = config or DEFAULT_CONFIG
    lexicon = get_status_lexicon(language)
    lang = Language.parse(language) or DEFAULT_LANGUAGE

    if not isinstance(text, str) or not text.strip():
        return StatusQuery(type=None, original_query="", language=lang)

    query = _prepare(text)

    for pattern in lexicon.room_status_patterns:
        matched = pattern.search(query)
        if matched:
            room = _clean(matched.groupdict().get("room"), lexicon)
            return StatusQuery(
                type=QueryType.ROOM_STATUS,
                original_query=text,
                language=lang,
                room=room,
                confidence=config.room_status_confidence,
            )

    for pattern in lexicon.status_patterns:
        matched = pattern.search(query)
        if not matched:
            continue
        groups = matched.groupdict()
        query_type, target, room = _refine(
            _clean(groups.get("target"), lexicon),
            _clean(groups.get("room"), lexicon),
            lexicon,
        )
        confidence = _status_confidence(query, matched.group(0), lexicon, config)
        logger.debug(
            "status_query type=%s target=%s room=%s confidence=%.2f",
            query_type.value,
            target,
            room,
            confidence,
        )
        return StatusQuery(
            type=query_type,
            original_query=text,
            language=lang,
            target=target,
            room=room,
            confidence=confidence,
        )

    if contains_term(normalize(query), lexicon.status_keywords):
        return StatusQuery(
            type=QueryType.DEVICE_STATUS,
            original_query=text,
            language=lang,
            target=text.strip(),
            confidence=config.keyword_confidence,
        )

    return StatusQuery(type=None, original_query=text, language=lang)


def is_status_query(
    text: object,
    language: Language | str | None,
    *,
    config: EngineConfig | None = None,
) -> bool:
    """置信度达到阈值时视为状态查询。"""
    config = config or DEFAULT_CONFIG
    result = classify(text, language, config=config)
    return result.type is not None and result.confidence >= config.status_min_confidence


def determine_query_scope(query: StatusQuery) -> str:
    """返回查询范围：global / room / device_type / device / none。"""
    if query.type is None:
        return "none"
    if query.type == QueryType.GLOBAL_STATUS:
        return "global"
    if query.type == QueryType.ROOM_STATUS:
        return "room"
    if query.type == QueryType.DEVICE_TYPE_STATUS:
        return "device_type"
    return "device"


def _prepare(text: str) -> str:
    query = text.translate(_APOSTROPHES).lower()
    query = re.sub(r"\s+", " ", query)
    return query.strip(_TRAILING_PUNCT)


def _clean(value: str | None, lexicon: StatusLexicon) -> str | None:
    """去掉首尾空白、标点与前置冠词。"""
    if value is None:
        return None
    cleaned = value.strip(_TRAILING_PUNCT + ",")
    cleaned = re.sub(rf"^(?:{lexicon.articles})\s+", "", cleaned)
    cleaned = re.sub(r"^l'", "", cleaned) if lexicon.language == Language.FR else cleaned
    return cleaned.strip() or None


def _refine(
    target: str | None,
    room: str | None,
    lexicon: StatusLexicon,
) -> tuple[QueryType, str | None, str | None]:
    """根据目标文本细化查询类型，并拆出房间。"""
    if target and room is None:
        for separator in lexicon.room_separators:
            if separator in f" {target} ":
                head, _, tail = f" {target} ".partition(separator)
                if head.strip() and tail.strip():
                    target = _clean(head, lexicon)
                    room = _clean(tail, lexicon)
                    break

    if target and room is None:
        suffix = re.match(rf"^(?P<room>.+?)\s+(?P<device>{lexicon.device_words})$", target)
        if suffix:
            room = suffix.group("room").strip()
            target = suffix.group("device")

    target_norm = normalize(target)
    if target and contains_term(target_norm, GLOBAL_WORDS) and room is None:
        return QueryType.GLOBAL_STATUS, "all devices", None
    if target and room is None and target_norm in {normalize(w) for w in lexicon.generic_device_words}:
        return QueryType.GLOBAL_STATUS, "all devices", None
    if target and room is not None and target_norm in {normalize(w) for w in lexicon.generic_device_words}:
        return QueryType.ROOM_STATUS, None, room

    if target and re.fullmatch(lexicon.device_words, target):
        return QueryType.DEVICE_TYPE_STATUS, target, room

    if target and room is None and _is_roomish(target, lexicon):
        return QueryType.ROOM_STATUS, None, target

    return QueryType.DEVICE_STATUS, target, room


def _is_roomish(target: str, lexicon: StatusLexicon) -> bool:
    if re.search(rf"(?<!\w)(?:{lexicon.device_words})(?!\w)", target):
        return False
    target_norm = normalize(target)
    return any(normalize(word) in target_norm for word in lexicon.room_words)


def _status_confidence(
    query: str,
    matched_text: str,
    lexicon: StatusLexicon,
    config: EngineConfig,
) -> float:
    """通用状态层的置信度：长查询降低，含强关键词提高。"""
    confidence = config.status_confidence
    if len(query) > config.status_long_query_length:
        confidence -= config.status_adjustment
    if any(keyword in matched_text for keyword in lexicon.strong_keywords):
        confidence += config.status_adjustment
    return round(max(0.0, min(1.0, confidence)), 4)
