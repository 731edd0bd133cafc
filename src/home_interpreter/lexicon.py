"""多语言词表注册表。

每种语言一个不可变 Lexicon，记录房间别名、动作、设备类型、
连接词等表面形式到规范名的映射。未知语言回退到英语。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from home_interpreter.models import Language
from home_interpreter.text import normalize

DEFAULT_LANGUAGE = Language.EN


@dataclass(frozen=True)
class Lexicon:
    """单一语言的词表。"""

    language: Language
    rooms: dict[str, tuple[str, ...]]
    actions: dict[str, tuple[str, ...]]
    device_types: dict[str, tuple[str, ...]]
    connectors: tuple[str, ...] = ()
    action_verbs: tuple[str, ...] = ()
    filler_words: tuple[str, ...] = ()
    all_words: tuple[str, ...] = ()
    some_words: tuple[str, ...] = ()
    # 房间短语：方位介词之后、断词之前的部分
    locatives: tuple[str, ...] = ()
    determiners: tuple[str, ...] = ()
    phrase_breaks: tuple[str, ...] = ()


@dataclass(frozen=True)
class TermHit:
    """一次词表命中。surface 为规范化后的命中文本。"""

    canonical: str
    surface: str
    start: int
    end: int


ENGLISH = Lexicon(
    language=Language.EN,
    rooms={
        "living room": ("living room", "lounge", "sitting room", "family room", "livingroom"),
        "bedroom": ("bedroom", "bed room", "master bedroom", "guest bedroom"),
        "kitchen": ("kitchen", "cook room"),
        "bathroom": ("bathroom", "bath room", "toilet", "restroom", "washroom"),
        "office": ("office", "study", "work room", "home office"),
        "dining room": ("dining room", "dining area"),
        "garage": ("garage", "car port"),
        "basement": ("basement", "cellar"),
        "attic": ("attic", "loft"),
        "hallway": ("hallway", "corridor", "hall"),
        "balcony": ("balcony", "terrace", "patio"),
        "garden": ("garden", "yard", "backyard"),
    },
    actions={
        "turn_on": ("turn on", "switch on", "power on", "activate", "enable", "start", "illuminate", "on"),
        "turn_off": ("turn off", "switch off", "power off", "shut off", "shut down", "deactivate", "disable", "stop", "off"),
        "dim": ("dim", "reduce brightness", "make dimmer", "darken"),
        "brighten": ("brighten", "increase brightness", "make brighter"),
        "set_temperature": ("set temperature", "set temp", "set the temperature", "heat", "cool"),
        "play_music": ("play music", "start music", "music on", "play"),
        "stop_music": ("stop music", "pause music", "music off", "stop the music"),
        "open": ("open", "raise", "lift"),
        "close": ("close", "lower", "shut"),
        "lock": ("lock", "secure"),
        "unlock": ("unlock", "open lock"),
    },
    device_types={
        "light": ("light", "lights", "lamp", "lamps", "bulb", "bulbs", "lighting", "ligt", "ligts"),
        "speaker": ("speaker", "speakers", "music", "audio", "sonos"),
        "thermostat": ("thermostat", "heating", "temperature", "heater", "temp"),
        "lock": ("lock", "locks", "door lock"),
        "curtain": ("curtain", "curtains", "blinds", "shades"),
        "fan": ("fan", "fans", "ventilation"),
        "tv": ("tv", "television", "telly"),
        "socket": ("socket", "sockets", "plug", "plugs", "outlet", "outlets"),
        "sensor": ("sensor", "sensors"),
    },
    connectors=("and then", "after that", "and", "then", "also", "plus"),
    action_verbs=("turn", "switch", "set", "dim", "brighten", "open", "close", "lock", "unlock", "play", "stop", "start", "pause"),
    filler_words=("please", "can you", "could you", "would you", "i want to", "i need to"),
    all_words=("all", "everything", "every"),
    some_words=("some", "few", "several"),
    locatives=("inside", "in"),
    determiners=("the", "my", "our"),
    phrase_breaks=("to", "at", "for", "with", "please", "now"),
)

SWEDISH = Lexicon(
    language=Language.SV,
    rooms={
        "living room": ("vardagsrum", "vardagsrummet", "allrum", "allrummet"),
        "bedroom": ("sovrum", "sovrummet"),
        "kitchen": ("kök", "köket"),
        "bathroom": ("badrum", "badrummet", "toalett", "toaletten"),
        "office": ("kontor", "kontoret", "arbetsrum", "arbetsrummet"),
        "dining room": ("matsal", "matsalen"),
        "garage": ("garage", "garaget"),
        "basement": ("källare", "källaren"),
        "attic": ("vind", "vinden"),
        "hallway": ("hall", "hallen", "korridor", "korridoren"),
        "balcony": ("balkong", "balkongen", "terrass", "terrassen"),
        "garden": ("trädgård", "trädgården", "trägård", "trägården"),
    },
    actions={
        "turn_on": ("sätta på", "sätt på", "slå på", "tänd", "tända", "aktivera", "starta"),
        "turn_off": ("stänga av", "stäng av", "slå av", "släck", "släcka", "deaktivera"),
        "dim": ("dimma", "dimra", "minska ljusstyrka", "minska ljusstyrkan"),
        "brighten": ("öka ljusstyrka", "öka ljusstyrkan", "ljusare"),
        "set_temperature": ("ställ in temperaturen", "ställa in temperaturen", "värma", "kyla"),
        "play_music": ("spela musik", "spela", "musik på"),
        "stop_music": ("stoppa musik", "stoppa musiken", "musik av"),
        "open": ("öppna", "höja", "höj"),
        "close": ("stänga", "stäng", "sänka", "sänk"),
        "lock": ("låsa", "lås"),
        "unlock": ("låsa upp", "lås upp", "öppna lås"),
    },
    device_types={
        "light": ("ljus", "ljuset", "lampa", "lampan", "lampor", "lamporna", "belysning", "belysningen"),
        "speaker": ("högtalare", "högtalaren", "högtalarna", "musik", "musiken", "ljud"),
        "thermostat": ("termostat", "termostaten", "värme", "värmen", "temperatur", "temperaturen", "element"),
        "lock": ("dörrlås", "låset"),
        "curtain": ("gardin", "gardinen", "gardiner", "gardinerna", "persienner", "persiennerna"),
        "fan": ("fläkt", "fläkten", "fläktar", "ventilation"),
        "tv": ("tv", "tv:n", "television", "teve"),
        "socket": ("uttag", "eluttag", "kontakt", "kontakten", "stickpropp"),
        "sensor": ("sensor", "sensorn", "givare"),
    },
    connectors=("efter det", "och sedan", "och", "sedan", "även", "därefter"),
    action_verbs=("sätt på", "sätta på", "stäng av", "stänga av", "slå på", "slå av", "tänd", "släck", "ställ in", "öppna", "stäng", "lås", "spela", "stoppa"),
    filler_words=("snälla", "kan du", "skulle du kunna", "jag vill"),
    all_words=("alla", "allt", "hela"),
    some_words=("några", "vissa", "lite"),
    locatives=("inne i", "i"),
    determiners=("min", "mitt", "vår", "vårt"),
    phrase_breaks=("till", "på", "med", "nu", "av"),
)

SPANISH = Lexicon(
    language=Language.ES,
    rooms={
        "living room": ("sala de estar", "salón", "sala", "cuarto de estar"),
        "bedroom": ("dormitorio", "habitación", "cuarto", "alcoba"),
        "kitchen": ("cocina",),
        "bathroom": ("baño", "aseo", "servicio"),
        "office": ("oficina", "estudio", "despacho"),
        "dining room": ("comedor", "sala de comedor"),
        "garage": ("garaje", "cochera"),
        "basement": ("sótano", "bodega"),
        "attic": ("ático", "desván"),
        "hallway": ("pasillo", "corredor"),
        "balcony": ("balcón", "terraza"),
        "garden": ("jardín", "patio"),
    },
    actions={
        "turn_on": ("encender", "enciende", "prender", "prende", "activar", "conectar"),
        "turn_off": ("apagar", "apaga", "desactivar", "desconectar"),
        "dim": ("atenuar", "reducir brillo", "bajar el brillo"),
        "brighten": ("aumentar brillo", "subir el brillo", "iluminar más"),
        "set_temperature": ("calentar", "enfriar", "ajustar temperatura"),
        "play_music": ("poner música", "pon música", "reproducir música"),
        "stop_music": ("parar música", "pausar música"),
        "open": ("abrir", "abre", "levantar"),
        "close": ("cerrar", "cierra", "bajar"),
        "lock": ("cerrar con llave", "bloquear"),
        "unlock": ("desbloquear",),
    },
    device_types={
        "light": ("luz", "luces", "lámpara", "lámparas", "bombilla", "bombillas"),
        "speaker": ("altavoz", "altavoces", "música", "audio"),
        "thermostat": ("termostato", "calefacción", "temperatura"),
        "lock": ("cerradura", "cerraduras", "cerrojo"),
        "curtain": ("cortina", "cortinas", "persiana", "persianas"),
        "fan": ("ventilador", "ventiladores"),
        "tv": ("tv", "televisión", "televisor", "tele"),
        "socket": ("enchufe", "enchufes", "toma"),
        "sensor": ("sensor", "sensores"),
    },
    connectors=("y luego", "después", "entonces", "también", "además", "y"),
    action_verbs=("encender", "enciende", "apagar", "apaga", "poner", "pon", "abrir", "cerrar", "bloquear", "reproducir", "parar"),
    filler_words=("por favor", "puedes", "podrías", "quiero"),
    all_words=("todo", "todos", "todas"),
    some_words=("algunos", "algunas"),
    locatives=("dentro de", "en"),
    determiners=("el", "la", "los", "las", "mi"),
    phrase_breaks=("a", "al", "para", "con", "ahora"),
)

FRENCH = Lexicon(
    language=Language.FR,
    rooms={
        "living room": ("salon", "salle de séjour", "séjour", "living"),
        "bedroom": ("chambre", "chambre à coucher"),
        "kitchen": ("cuisine",),
        "bathroom": ("salle de bain", "salle de bains", "toilettes"),
        "office": ("bureau", "cabinet de travail"),
        "dining room": ("salle à manger",),
        "garage": ("garage",),
        "basement": ("sous-sol", "cave"),
        "attic": ("grenier", "combles"),
        "hallway": ("couloir", "hall", "entrée"),
        "balcony": ("balcon", "terrasse"),
        "garden": ("jardin",),
    },
    actions={
        "turn_on": ("allumer", "allume", "activer", "mettre en marche"),
        "turn_off": ("éteindre", "éteins", "désactiver", "arrêter"),
        "dim": ("tamiser", "réduire luminosité", "baisser la lumière"),
        "brighten": ("augmenter luminosité", "éclaircir"),
        "set_temperature": ("chauffer", "refroidir", "régler la température"),
        "play_music": ("jouer musique", "mettre musique", "mets de la musique", "jouer"),
        "stop_music": ("arrêter musique", "arrêter la musique", "pause musique"),
        "open": ("ouvrir", "ouvre", "lever"),
        "close": ("fermer", "ferme", "baisser"),
        "lock": ("verrouiller", "fermer à clé"),
        "unlock": ("déverrouiller",),
    },
    device_types={
        "light": ("lumière", "lumières", "lampe", "lampes", "éclairage"),
        "speaker": ("haut-parleur", "haut-parleurs", "enceinte", "musique", "audio"),
        "thermostat": ("thermostat", "chauffage", "température"),
        "lock": ("serrure", "serrures", "verrou"),
        "curtain": ("rideau", "rideaux", "store", "stores", "volets"),
        "fan": ("ventilateur", "ventilateurs"),
        "tv": ("tv", "télévision", "télé"),
        "socket": ("prise", "prises", "prise électrique"),
        "sensor": ("capteur", "capteurs"),
    },
    connectors=("et puis", "ensuite", "puis", "aussi", "après", "et"),
    action_verbs=("allumer", "allume", "éteindre", "éteins", "mettre", "ouvrir", "fermer", "verrouiller", "jouer", "arrêter"),
    filler_words=("s'il te plaît", "s'il vous plaît", "peux-tu", "pouvez-vous", "je veux"),
    all_words=("tout", "tous", "toutes"),
    some_words=("quelques", "certains", "certaines"),
    locatives=("dans",),
    determiners=("le", "la", "les", "l'", "ma", "mon"),
    phrase_breaks=("à", "au", "pour", "avec", "maintenant"),
)

GERMAN = Lexicon(
    language=Language.DE,
    rooms={
        "living room": ("wohnzimmer", "wohnraum", "stube"),
        "bedroom": ("schlafzimmer", "schlafraum"),
        "kitchen": ("küche",),
        "bathroom": ("badezimmer", "bad", "toilette"),
        "office": ("büro", "arbeitszimmer", "homeoffice"),
        "dining room": ("esszimmer", "speisezimmer"),
        "garage": ("garage",),
        "basement": ("keller", "untergeschoss"),
        "attic": ("dachboden", "speicher"),
        "hallway": ("flur", "diele"),
        "balcony": ("balkon", "terrasse"),
        "garden": ("garten",),
    },
    actions={
        "turn_on": ("einschalten", "anschalten", "anmachen", "schalte ein", "aktivieren"),
        "turn_off": ("ausschalten", "abschalten", "ausmachen", "schalte aus", "deaktivieren"),
        "dim": ("dimmen", "dunkler machen", "reduzieren"),
        "brighten": ("heller machen", "aufhellen"),
        "set_temperature": ("heizen", "kühlen", "temperatur einstellen"),
        "play_music": ("musik abspielen", "musik an", "abspielen", "spiele musik"),
        "stop_music": ("musik stoppen", "musik aus"),
        "open": ("öffnen", "öffne", "aufmachen"),
        "close": ("schließen", "schließe", "zumachen"),
        "lock": ("abschließen", "sperren"),
        "unlock": ("aufschließen", "entsperren"),
    },
    device_types={
        "light": ("licht", "lichter", "lampe", "lampen", "beleuchtung"),
        "speaker": ("lautsprecher", "musik", "audio"),
        "thermostat": ("thermostat", "heizung", "temperatur"),
        "lock": ("schloss", "schlösser", "türschloss"),
        "curtain": ("vorhang", "vorhänge", "jalousie", "jalousien", "rollladen"),
        "fan": ("ventilator", "ventilatoren", "lüfter"),
        "tv": ("tv", "fernseher", "fernsehen"),
        "socket": ("steckdose", "steckdosen", "stecker"),
        "sensor": ("sensor", "sensoren", "fühler"),
    },
    connectors=("und dann", "anschließend", "danach", "dann", "auch", "und"),
    action_verbs=("einschalten", "ausschalten", "schalte", "setzen", "öffnen", "öffne", "schließen", "schließe", "sperren", "spielen", "spiele", "stoppen"),
    filler_words=("bitte", "kannst du", "könntest du", "ich möchte"),
    all_words=("alle", "alles"),
    some_words=("einige", "manche"),
    locatives=("im", "in der", "in dem", "in"),
    determiners=("der", "die", "das", "den", "dem", "mein", "meinem"),
    phrase_breaks=("ein", "aus", "an", "auf", "zu", "für", "mit", "jetzt"),
)

ITALIAN = Lexicon(
    language=Language.IT,
    rooms={
        "living room": ("soggiorno", "salotto", "sala"),
        "bedroom": ("camera da letto", "camera", "stanza da letto"),
        "kitchen": ("cucina",),
        "bathroom": ("bagno", "toilette"),
        "office": ("ufficio", "studio"),
        "dining room": ("sala da pranzo",),
        "garage": ("garage", "box"),
        "basement": ("cantina", "seminterrato"),
        "attic": ("soffitta", "mansarda"),
        "hallway": ("corridoio", "ingresso"),
        "balcony": ("balcone", "terrazza"),
        "garden": ("giardino",),
    },
    actions={
        "turn_on": ("accendere", "accendi", "attivare"),
        "turn_off": ("spegnere", "spegni", "disattivare"),
        "dim": ("attenuare", "ridurre luminosità"),
        "brighten": ("aumentare luminosità", "schiarire"),
        "set_temperature": ("riscaldare", "raffreddare", "imposta la temperatura"),
        "play_music": ("suonare musica", "metti musica", "metti la musica"),
        "stop_music": ("fermare musica", "ferma la musica", "pausa musica"),
        "open": ("aprire", "apri", "alzare"),
        "close": ("chiudere", "chiudi", "abbassare"),
        "lock": ("chiudere a chiave", "bloccare"),
        "unlock": ("sbloccare",),
    },
    device_types={
        "light": ("luce", "luci", "lampada", "lampade", "illuminazione"),
        "speaker": ("altoparlante", "altoparlanti", "musica", "audio"),
        "thermostat": ("termostato", "riscaldamento", "temperatura"),
        "lock": ("serratura", "serrature", "lucchetto"),
        "curtain": ("tenda", "tende", "persiana", "persiane"),
        "fan": ("ventilatore", "ventilatori"),
        "tv": ("tv", "televisione", "televisore"),
        "socket": ("presa", "prese", "spina"),
        "sensor": ("sensore", "sensori"),
    },
    connectors=("e poi", "successivamente", "dopo", "poi", "anche", "e"),
    action_verbs=("accendere", "accendi", "spegnere", "spegni", "impostare", "aprire", "apri", "chiudere", "chiudi", "bloccare", "suonare", "fermare"),
    filler_words=("per favore", "puoi", "potresti", "voglio"),
    all_words=("tutto", "tutti", "tutte"),
    some_words=("alcuni", "alcune"),
    locatives=("nella", "nello", "nel", "in"),
    determiners=("il", "la", "lo", "l'", "mia", "mio"),
    phrase_breaks=("a", "al", "per", "con", "ora"),
)

PORTUGUESE = Lexicon(
    language=Language.PT,
    rooms={
        "living room": ("sala de estar", "sala", "living"),
        "bedroom": ("quarto", "dormitório", "quarto de dormir"),
        "kitchen": ("cozinha",),
        "bathroom": ("banheiro", "casa de banho", "wc"),
        "office": ("escritório", "gabinete"),
        "dining room": ("sala de jantar",),
        "garage": ("garagem",),
        "basement": ("porão", "cave"),
        "attic": ("sótão", "águas-furtadas"),
        "hallway": ("corredor", "hall"),
        "balcony": ("varanda", "terraço"),
        "garden": ("jardim",),
    },
    actions={
        "turn_on": ("ligar", "liga", "acender", "acende", "ativar"),
        "turn_off": ("desligar", "desliga", "apagar", "apaga", "desativar"),
        "dim": ("diminuir", "atenuar", "reduzir brilho"),
        "brighten": ("aumentar brilho", "clarear"),
        "set_temperature": ("aquecer", "esfriar", "ajustar temperatura"),
        "play_music": ("tocar música", "tocar"),
        "stop_music": ("parar música", "pausar música"),
        "open": ("abrir", "abre", "levantar"),
        "close": ("fechar", "fecha", "baixar"),
        "lock": ("trancar", "bloquear"),
        "unlock": ("destrancar", "desbloquear"),
    },
    device_types={
        "light": ("luz", "luzes", "lâmpada", "lâmpadas", "iluminação"),
        "speaker": ("alto-falante", "alto-falantes", "coluna", "música", "áudio"),
        "thermostat": ("termostato", "aquecimento", "temperatura"),
        "lock": ("fechadura", "fechaduras", "tranca"),
        "curtain": ("cortina", "cortinas", "persiana", "persianas"),
        "fan": ("ventilador", "ventiladores"),
        "tv": ("tv", "televisão", "televisor"),
        "socket": ("tomada", "tomadas", "plugue"),
        "sensor": ("sensor", "sensores"),
    },
    connectors=("em seguida", "depois", "então", "também", "e"),
    action_verbs=("ligar", "liga", "desligar", "desliga", "definir", "abrir", "fechar", "trancar", "tocar", "parar"),
    filler_words=("por favor", "você pode", "podes", "quero"),
    all_words=("tudo", "todos", "todas"),
    some_words=("alguns", "algumas"),
    locatives=("na", "no", "em"),
    determiners=("o", "a", "os", "as", "meu", "minha"),
    phrase_breaks=("para", "com", "agora"),
)

DUTCH = Lexicon(
    language=Language.NL,
    rooms={
        "living room": ("woonkamer", "zitkamer", "huiskamer"),
        "bedroom": ("slaapkamer",),
        "kitchen": ("keuken",),
        "bathroom": ("badkamer", "toilet", "wc"),
        "office": ("kantoor", "studeerkamer", "werkkamer"),
        "dining room": ("eetkamer",),
        "garage": ("garage",),
        "basement": ("kelder", "souterrain"),
        "attic": ("zolder", "vliering"),
        "hallway": ("gang", "hal"),
        "balcony": ("balkon", "terras"),
        "garden": ("tuin",),
    },
    actions={
        "turn_on": ("aanzetten", "zet aan", "inschakelen", "activeren"),
        "turn_off": ("uitzetten", "zet uit", "uitschakelen", "deactiveren"),
        "dim": ("dimmen", "zachter maken", "verlagen"),
        "brighten": ("feller maken", "verhogen"),
        "set_temperature": ("verwarmen", "koelen", "temperatuur instellen"),
        "play_music": ("muziek afspelen", "speel muziek", "muziek aan"),
        "stop_music": ("muziek stoppen", "muziek uit"),
        "open": ("openen", "open", "omhoog"),
        "close": ("sluiten", "sluit", "omlaag"),
        "lock": ("vergrendelen", "op slot"),
        "unlock": ("ontgrendelen", "van slot"),
    },
    device_types={
        "light": ("licht", "lichten", "lamp", "lampen", "verlichting"),
        "speaker": ("luidspreker", "luidsprekers", "speaker", "muziek", "audio"),
        "thermostat": ("thermostaat", "verwarming", "temperatuur"),
        "lock": ("slot", "sloten", "deurslot"),
        "curtain": ("gordijn", "gordijnen", "jaloezie", "jaloezieën"),
        "fan": ("ventilator", "ventilatoren"),
        "tv": ("tv", "televisie"),
        "socket": ("stopcontact", "stopcontacten", "stekker"),
        "sensor": ("sensor", "sensoren"),
    },
    connectors=("en dan", "daarna", "vervolgens", "dan", "ook", "en"),
    action_verbs=("aanzetten", "uitzetten", "zet", "instellen", "openen", "sluiten", "vergrendelen", "afspelen", "speel", "stoppen"),
    filler_words=("alsjeblieft", "kun je", "kunt u", "ik wil"),
    all_words=("alle", "alles"),
    some_words=("sommige", "enkele"),
    locatives=("in",),
    determiners=("de", "het", "mijn"),
    phrase_breaks=("aan", "uit", "naar", "op", "voor", "met", "nu"),
)

LEXICONS: dict[Language, Lexicon] = {
    lexicon.language: lexicon
    for lexicon in (ENGLISH, SWEDISH, SPANISH, FRENCH, GERMAN, ITALIAN, PORTUGUESE, DUTCH)
}


def get_lexicon(language: Language | str | None) -> Lexicon:
    """按语言取词表，未知或未收录的语言回退到英语。"""
    lang = Language.parse(language)
    if lang is None:
        return LEXICONS[DEFAULT_LANGUAGE]
    return LEXICONS.get(lang, LEXICONS[DEFAULT_LANGUAGE])


def other_lexicons(lexicon: Lexicon) -> list[Lexicon]:
    """返回除给定词表外的其余词表，保持注册顺序。"""
    return [item for item in LEXICONS.values() if item.language != lexicon.language]


def room_aliases(canonical: str) -> list[str]:
    """返回规范房间名在所有语言中的别名，按注册顺序去重。"""
    aliases: list[str] = []
    seen: set[str] = set()
    for lexicon in LEXICONS.values():
        for alias in lexicon.rooms.get(canonical, ()):
            key = normalize(alias)
            if key and key not in seen:
                seen.add(key)
                aliases.append(alias)
    return aliases


def canonical_room_for(surface: str) -> str | None:
    """根据任一语言中的别名反查规范房间名。"""
    key = normalize(surface)
    if not key:
        return None
    for lexicon in LEXICONS.values():
        for canonical, aliases in lexicon.rooms.items():
            if any(normalize(alias) == key for alias in aliases):
                return canonical
    return None


@lru_cache(maxsize=None)
def _compile_term(term: str) -> re.Pattern[str]:
    """把规范化后的词条编译为按词边界匹配的模式。"""
    return re.compile(r"(?<!\w)" + re.escape(term) + r"(?!\w)")


def _sorted_terms(table: dict[str, tuple[str, ...]]) -> list[tuple[str, str]]:
    """展开词表为 (规范化词条, 规范名)，长词条优先，同一词条只保留首次定义。"""
    entries: list[tuple[str, str]] = []
    seen: set[str] = set()
    for canonical, surfaces in table.items():
        for surface in surfaces:
            term = normalize(surface)
            if term and term not in seen:
                seen.add(term)
                entries.append((term, canonical))
    # 稳定排序，长度相同时保持定义顺序
    entries.sort(key=lambda item: len(item[0]), reverse=True)
    return entries


def find_terms(normalized_text: str, table: dict[str, tuple[str, ...]]) -> list[TermHit]:
    """在规范化文本中查找词表命中。

    长词条优先，已被占用的区间不再重复匹配；
    结果按在文本中出现的位置排序。
    """
    if not normalized_text:
        return []
    occupied: list[tuple[int, int]] = []
    hits: list[TermHit] = []
    for term, canonical in _sorted_terms(table):
        for match in _compile_term(term).finditer(normalized_text):
            start, end = match.span()
            if any(start < o_end and o_start < end for o_start, o_end in occupied):
                continue
            occupied.append((start, end))
            hits.append(TermHit(canonical=canonical, surface=term, start=start, end=end))
    hits.sort(key=lambda hit: hit.start)
    return hits


def contains_term(normalized_text: str, terms: tuple[str, ...] | list[str]) -> bool:
    """判断规范化文本是否按词边界包含任一词条。"""
    for term in terms:
        key = normalize(term)
        if key and _compile_term(key).search(normalized_text):
            return True
    return False
