"""Static German vocabulary catalog (A1/A2) and the vocabulary snapshot."""

import logging

from .config import PRONOUNS, SNAPSHOT_SENTINEL_KEY
from .interfaces import Storage
from .models import Catalog
from .utils import format_timestamp, utc_now

logger = logging.getLogger(__name__)


def _conj(*forms: str) -> dict:
    """Conjugation table in PRONOUNS order."""
    return dict(zip(PRONOUNS, forms))


# German vocabulary by category: {category_key: [record, ...]}
VOCABULARY = {
    'nouns': [
        {'id': 'n-apfel', 'level': 'A1', 'word': 'Apfel', 'article': 'der', 'plural': 'Äpfel',
         'english': 'apple'},
        {'id': 'n-haus', 'level': 'A1', 'word': 'Haus', 'article': 'das', 'plural': 'Häuser',
         'english': 'house', 'accepted_meanings': ['house', 'home', 'building']},
        {'id': 'n-frau', 'level': 'A1', 'word': 'Frau', 'article': 'die', 'plural': 'Frauen',
         'english': 'woman', 'accepted_meanings': ['woman', 'wife', 'mrs']},
        {'id': 'n-kind', 'level': 'A1', 'word': 'Kind', 'article': 'das', 'plural': 'Kinder',
         'english': 'child', 'accepted_meanings': ['child', 'kid']},
        {'id': 'n-tisch', 'level': 'A1', 'word': 'Tisch', 'article': 'der', 'plural': 'Tische',
         'english': 'table'},
        {'id': 'n-buch', 'level': 'A1', 'word': 'Buch', 'article': 'das', 'plural': 'Bücher',
         'english': 'book'},
        {'id': 'n-stadt', 'level': 'A1', 'word': 'Stadt', 'article': 'die', 'plural': 'Städte',
         'english': 'city', 'accepted_meanings': ['city', 'town']},
        {'id': 'n-schule', 'level': 'A1', 'word': 'Schule', 'article': 'die', 'plural': 'Schulen',
         'english': 'school'},
        {'id': 'n-zug', 'level': 'A1', 'word': 'Zug', 'article': 'der', 'plural': 'Züge',
         'english': 'train'},
        {'id': 'n-woche', 'level': 'A1', 'word': 'Woche', 'article': 'die', 'plural': 'Wochen',
         'english': 'week'},
        {'id': 'n-wohnung', 'level': 'A2', 'word': 'Wohnung', 'article': 'die', 'plural': 'Wohnungen',
         'english': 'apartment', 'accepted_meanings': ['apartment', 'flat']},
        {'id': 'n-geschenk', 'level': 'A2', 'word': 'Geschenk', 'article': 'das', 'plural': 'Geschenke',
         'english': 'gift', 'accepted_meanings': ['gift', 'present']},
        {'id': 'n-fahrrad', 'level': 'A2', 'word': 'Fahrrad', 'article': 'das', 'plural': 'Fahrräder',
         'english': 'bicycle', 'accepted_meanings': ['bicycle', 'bike']},
        {'id': 'n-krankenhaus', 'level': 'A2', 'word': 'Krankenhaus', 'article': 'das',
         'plural': 'Krankenhäuser', 'english': 'hospital'},
        {'id': 'n-fuehrerschein', 'level': 'A2', 'word': 'Führerschein', 'article': 'der',
         'plural': 'Führerscheine', 'english': "driver's license",
         'accepted_meanings': ["driver's license", 'driving licence']},
    ],
    'verbs': [
        {'id': 'v-machen', 'level': 'A1', 'infinitive': 'machen', 'english': 'to do',
         'accepted_meanings': ['to do', 'to make'], 'verb_type': 'regular',
         'conjugation': _conj('mache', 'machst', 'macht', 'machen', 'macht', 'machen')},
        {'id': 'v-wohnen', 'level': 'A1', 'infinitive': 'wohnen', 'english': 'to live',
         'accepted_meanings': ['to live', 'to reside'], 'verb_type': 'regular',
         'conjugation': _conj('wohne', 'wohnst', 'wohnt', 'wohnen', 'wohnt', 'wohnen')},
        {'id': 'v-lernen', 'level': 'A1', 'infinitive': 'lernen', 'english': 'to learn',
         'accepted_meanings': ['to learn', 'to study'], 'verb_type': 'regular',
         'conjugation': _conj('lerne', 'lernst', 'lernt', 'lernen', 'lernt', 'lernen')},
        {'id': 'v-arbeiten', 'level': 'A1', 'infinitive': 'arbeiten', 'english': 'to work',
         'verb_type': 'regular',
         'conjugation': _conj('arbeite', 'arbeitest', 'arbeitet', 'arbeiten', 'arbeitet', 'arbeiten')},
        {'id': 'v-sprechen', 'level': 'A1', 'infinitive': 'sprechen', 'english': 'to speak',
         'accepted_meanings': ['to speak', 'to talk'], 'verb_type': 'irregular',
         'details': 'Stem vowel e changes to i in the du and er/sie/es forms.',
         'conjugation': _conj('spreche', 'sprichst', 'spricht', 'sprechen', 'sprecht', 'sprechen')},
        {'id': 'v-lesen', 'level': 'A1', 'infinitive': 'lesen', 'english': 'to read',
         'verb_type': 'irregular',
         'details': 'Stem vowel e changes to ie in the du and er/sie/es forms.',
         'conjugation': _conj('lese', 'liest', 'liest', 'lesen', 'lest', 'lesen')},
        {'id': 'v-reisen', 'level': 'A2', 'infinitive': 'reisen', 'english': 'to travel',
         'verb_type': 'regular',
         'conjugation': _conj('reise', 'reist', 'reist', 'reisen', 'reist', 'reisen')},
        {'id': 'v-besuchen', 'level': 'A2', 'infinitive': 'besuchen', 'english': 'to visit',
         'verb_type': 'regular',
         'conjugation': _conj('besuche', 'besuchst', 'besucht', 'besuchen', 'besucht', 'besuchen')},
    ],
    'modalVerbs': [
        {'id': 'mv-koennen', 'level': 'A1', 'infinitive': 'können', 'english': 'can',
         'accepted_meanings': ['can', 'to be able to'],
         'conjugation': _conj('kann', 'kannst', 'kann', 'können', 'könnt', 'können'),
         'example': {'de': 'Ich kann schwimmen.', 'en': 'I can swim.'},
         'usage': {'prompt': 'Ich ___ schwimmen.', 'answer': 'kann', 'english': 'I can swim'}},
        {'id': 'mv-muessen', 'level': 'A1', 'infinitive': 'müssen', 'english': 'must',
         'accepted_meanings': ['must', 'to have to'],
         'conjugation': _conj('muss', 'musst', 'muss', 'müssen', 'müsst', 'müssen'),
         'example': {'de': 'Ich muss heute arbeiten.', 'en': 'I have to work today.'},
         'usage': {'prompt': 'Ich ___ heute arbeiten.', 'answer': 'muss',
                   'english': 'I have to work today'}},
        {'id': 'mv-wollen', 'level': 'A1', 'infinitive': 'wollen', 'english': 'to want',
         'accepted_meanings': ['to want', 'want'],
         'conjugation': _conj('will', 'willst', 'will', 'wollen', 'wollt', 'wollen'),
         'example': {'de': 'Ich will ein Eis essen.', 'en': 'I want to eat an ice cream.'},
         'usage': {'prompt': 'Ich ___ ein Eis essen.', 'answer': 'will',
                   'english': 'I want to eat an ice cream'}},
        {'id': 'mv-moechten', 'level': 'A1', 'infinitive': 'möchten', 'english': 'would like',
         'accepted_meanings': ['would like', 'to want'],
         'conjugation': _conj('möchte', 'möchtest', 'möchte', 'möchten', 'möchtet', 'möchten'),
         'example': {'de': 'Ich möchte einen Kaffee.', 'en': 'I would like a coffee.'},
         'usage': {'prompt': 'Ich ___ einen Kaffee.', 'answer': 'möchte',
                   'english': 'I would like a coffee'}},
        {'id': 'mv-duerfen', 'level': 'A2', 'infinitive': 'dürfen', 'english': 'may',
         'accepted_meanings': ['may', 'to be allowed to'],
         'conjugation': _conj('darf', 'darfst', 'darf', 'dürfen', 'dürft', 'dürfen'),
         'example': {'de': 'Hier darf man nicht rauchen.', 'en': 'You may not smoke here.'},
         'usage': {'prompt': 'Hier ___ man nicht rauchen.', 'answer': 'darf',
                   'english': 'You may not smoke here'}},
        {'id': 'mv-sollen', 'level': 'A2', 'infinitive': 'sollen', 'english': 'should',
         'accepted_meanings': ['should', 'to be supposed to'],
         'conjugation': _conj('soll', 'sollst', 'soll', 'sollen', 'sollt', 'sollen'),
         'example': {'de': 'Du sollst mehr Wasser trinken.', 'en': 'You should drink more water.'}},
    ],
    'irregularVerbs': [
        {'id': 'iv-essen', 'level': 'A1', 'infinitive': 'essen', 'english': 'to eat',
         'conjugation': _conj('esse', 'isst', 'isst', 'essen', 'esst', 'essen'),
         'partizip_ii': 'gegessen', 'perfect_aux': 'haben',
         'example': {'de': 'Ich habe Brot gegessen.', 'en': 'I ate bread.'}},
        {'id': 'iv-fahren', 'level': 'A1', 'infinitive': 'fahren', 'english': 'to drive',
         'accepted_meanings': ['to drive', 'to ride', 'to go'],
         'conjugation': _conj('fahre', 'fährst', 'fährt', 'fahren', 'fahrt', 'fahren'),
         'partizip_ii': 'gefahren', 'perfect_aux': 'sein',
         'example': {'de': 'Wir sind nach Berlin gefahren.', 'en': 'We drove to Berlin.'}},
        {'id': 'iv-gehen', 'level': 'A1', 'infinitive': 'gehen', 'english': 'to go',
         'accepted_meanings': ['to go', 'to walk'],
         'conjugation': _conj('gehe', 'gehst', 'geht', 'gehen', 'geht', 'gehen'),
         'partizip_ii': 'gegangen', 'perfect_aux': 'sein',
         'example': {'de': 'Sie ist nach Hause gegangen.', 'en': 'She went home.'}},
        {'id': 'iv-sehen', 'level': 'A1', 'infinitive': 'sehen', 'english': 'to see',
         'conjugation': _conj('sehe', 'siehst', 'sieht', 'sehen', 'seht', 'sehen'),
         'partizip_ii': 'gesehen', 'perfect_aux': 'haben',
         'example': {'de': 'Ich habe den Film gesehen.', 'en': 'I saw the film.'}},
        {'id': 'iv-schlafen', 'level': 'A1', 'infinitive': 'schlafen', 'english': 'to sleep',
         'conjugation': _conj('schlafe', 'schläfst', 'schläft', 'schlafen', 'schlaft', 'schlafen'),
         'partizip_ii': 'geschlafen', 'perfect_aux': 'haben',
         'example': {'de': 'Er hat gut geschlafen.', 'en': 'He slept well.'}},
        {'id': 'iv-kommen', 'level': 'A1', 'infinitive': 'kommen', 'english': 'to come',
         'conjugation': _conj('komme', 'kommst', 'kommt', 'kommen', 'kommt', 'kommen'),
         'partizip_ii': 'gekommen', 'perfect_aux': 'sein',
         'example': {'de': 'Wann bist du gekommen?', 'en': 'When did you come?'}},
        {'id': 'iv-nehmen', 'level': 'A1', 'infinitive': 'nehmen', 'english': 'to take',
         'conjugation': _conj('nehme', 'nimmst', 'nimmt', 'nehmen', 'nehmt', 'nehmen'),
         'partizip_ii': 'genommen', 'perfect_aux': 'haben',
         'example': {'de': 'Ich habe den Bus genommen.', 'en': 'I took the bus.'}},
        {'id': 'iv-trinken', 'level': 'A1', 'infinitive': 'trinken', 'english': 'to drink',
         'conjugation': _conj('trinke', 'trinkst', 'trinkt', 'trinken', 'trinkt', 'trinken'),
         'partizip_ii': 'getrunken', 'perfect_aux': 'haben',
         'example': {'de': 'Wir haben Tee getrunken.', 'en': 'We drank tea.'}},
        {'id': 'iv-helfen', 'level': 'A2', 'infinitive': 'helfen', 'english': 'to help',
         'conjugation': _conj('helfe', 'hilfst', 'hilft', 'helfen', 'helft', 'helfen'),
         'partizip_ii': 'geholfen', 'perfect_aux': 'haben',
         'example': {'de': 'Sie hat mir geholfen.', 'en': 'She helped me.'}},
        {'id': 'iv-treffen', 'level': 'A2', 'infinitive': 'treffen', 'english': 'to meet',
         'conjugation': _conj('treffe', 'triffst', 'trifft', 'treffen', 'trefft', 'treffen'),
         'partizip_ii': 'getroffen', 'perfect_aux': 'haben',
         'example': {'de': 'Ich habe Anna getroffen.', 'en': 'I met Anna.'}},
        {'id': 'iv-schreiben', 'level': 'A2', 'infinitive': 'schreiben', 'english': 'to write',
         'conjugation': _conj('schreibe', 'schreibst', 'schreibt', 'schreiben', 'schreibt', 'schreiben'),
         'partizip_ii': 'geschrieben', 'perfect_aux': 'haben',
         'example': {'de': 'Er hat einen Brief geschrieben.', 'en': 'He wrote a letter.'}},
    ],
    'separableVerbs': [
        {'id': 'sv-anrufen', 'level': 'A1', 'infinitive': 'anrufen', 'english': 'to call',
         'accepted_meanings': ['to call', 'to phone', 'to ring'],
         'prefix': 'an', 'base_verb': 'rufen',
         'conjugation': _conj('rufe an', 'rufst an', 'ruft an', 'rufen an', 'ruft an', 'rufen an'),
         'example': {'de': 'Ich rufe dich an.', 'en': 'I call you.'},
         'usage': {'prompt': 'Ich ___ dich ___.', 'answer': 'rufe an', 'english': 'I call you'}},
        {'id': 'sv-aufstehen', 'level': 'A1', 'infinitive': 'aufstehen', 'english': 'to get up',
         'accepted_meanings': ['to get up', 'to stand up'],
         'prefix': 'auf', 'base_verb': 'stehen',
         'conjugation': _conj('stehe auf', 'stehst auf', 'steht auf', 'stehen auf', 'steht auf',
                              'stehen auf'),
         'example': {'de': 'Ich stehe um sieben Uhr auf.', 'en': 'I get up at seven.'},
         'usage': {'prompt': 'Ich ___ um sieben Uhr ___.', 'answer': 'stehe auf',
                   'english': 'I get up at seven'}},
        {'id': 'sv-einkaufen', 'level': 'A1', 'infinitive': 'einkaufen', 'english': 'to shop',
         'accepted_meanings': ['to shop', 'to go shopping'],
         'prefix': 'ein', 'base_verb': 'kaufen',
         'conjugation': _conj('kaufe ein', 'kaufst ein', 'kauft ein', 'kaufen ein', 'kauft ein',
                              'kaufen ein'),
         'example': {'de': 'Wir kaufen am Samstag ein.', 'en': 'We go shopping on Saturday.'},
         'usage': {'prompt': 'Wir ___ am Samstag ___.', 'answer': 'kaufen ein',
                   'english': 'We go shopping on Saturday'}},
        {'id': 'sv-fernsehen', 'level': 'A1', 'infinitive': 'fernsehen', 'english': 'to watch TV',
         'accepted_meanings': ['to watch tv', 'to watch television'],
         'prefix': 'fern', 'base_verb': 'sehen',
         'conjugation': _conj('sehe fern', 'siehst fern', 'sieht fern', 'sehen fern', 'seht fern',
                              'sehen fern'),
         'example': {'de': 'Er sieht am Abend fern.', 'en': 'He watches TV in the evening.'},
         'usage': {'prompt': 'Er ___ am Abend ___.', 'answer': 'sieht fern',
                   'english': 'He watches TV in the evening'}},
        {'id': 'sv-abfahren', 'level': 'A2', 'infinitive': 'abfahren', 'english': 'to depart',
         'accepted_meanings': ['to depart', 'to leave'],
         'prefix': 'ab', 'base_verb': 'fahren',
         'conjugation': _conj('fahre ab', 'fährst ab', 'fährt ab', 'fahren ab', 'fahrt ab', 'fahren ab'),
         'example': {'de': 'Der Zug fährt um acht Uhr ab.', 'en': 'The train departs at eight.'},
         'usage': {'prompt': 'Der Zug ___ um acht Uhr ___.', 'answer': 'fährt ab',
                   'english': 'The train departs at eight'}},
        {'id': 'sv-umsteigen', 'level': 'A2', 'infinitive': 'umsteigen', 'english': 'to change trains',
         'accepted_meanings': ['to change trains', 'to transfer'],
         'prefix': 'um', 'base_verb': 'steigen',
         'conjugation': _conj('steige um', 'steigst um', 'steigt um', 'steigen um', 'steigt um',
                              'steigen um'),
         'example': {'de': 'In Köln steigen wir um.', 'en': 'We change trains in Cologne.'}},
    ],
}


def load_catalog(data: dict = None) -> Catalog:
    """Build the catalog from a category mapping (defaults to VOCABULARY)."""
    return Catalog.from_dict(VOCABULARY if data is None else data)


def get_snapshot_data(catalog: Catalog) -> dict:
    """Snapshot records: one per category plus the sentinel."""
    snapshot = {SNAPSHOT_SENTINEL_KEY: {'at': format_timestamp(utc_now())}}
    snapshot.update(catalog.to_dict())
    return snapshot


def persist_vocabulary_if_missing(storage: Storage, catalog: Catalog) -> bool:
    """Freeze the catalog into storage once. Returns True if written now."""
    if storage.has_vocabulary_snapshot():
        logger.debug("Vocabulary snapshot already present")
        return False
    storage.save_vocabulary_snapshot(get_snapshot_data(catalog))
    logger.info(f"Vocabulary snapshot written ({len(catalog)} items)")
    return True
