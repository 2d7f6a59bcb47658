"""
Enumerated values and reference data shared by the inventory models
"""


class Role:
    ADMIN = 'ADMIN'
    GESTIONNAIRE = 'GESTIONNAIRE'
    LECTURE = 'LECTURE'

    ALL = (ADMIN, GESTIONNAIRE, LECTURE)


class AssetStatus:
    EN_STOCK = 'EN_STOCK'
    PRETE = 'PRETE'
    HS = 'HS'
    REPARATION = 'REPARATION'

    ALL = (EN_STOCK, PRETE, HS, REPARATION)


class LoanStatus:
    OPEN = 'OPEN'
    CLOSED = 'CLOSED'

    ALL = (OPEN, CLOSED)


class AuditAction:
    CREATE = 'CREATE'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'


# Equipment types tracked by quantity (StockItem) rather than per unit
CONSUMABLE_TYPES = ('Câble', 'Adaptateur', 'Autre')

# Asset tag prefixes per equipment type
TAG_PREFIXES = {
    'Ordinateur portable': 'LAP-',
    'Ordinateur fixe': 'DSK-',
    'Écran': 'MON-',
    'Clavier': 'KB-',
    'Souris': 'MS-',
    'Casque audio': 'HS-',
    'Webcam': 'WC-',
    "Station d'accueil": 'DOCK-',
    'Téléphone portable': 'TEL-',
    'Câble': 'CAB-',
    'Adaptateur': 'ADP-',
    'Autre': 'OTH-',
}
DEFAULT_TAG_PREFIX = 'ASSET-'

DEFAULT_EQUIPMENT_TYPES = tuple(TAG_PREFIXES.keys())


def is_consumable_type(type_name):
    return type_name in CONSUMABLE_TYPES


def tag_prefix_for_type(type_name):
    return TAG_PREFIXES.get(type_name, DEFAULT_TAG_PREFIX)
