"""Fixed keyword vocabularies recognized in free-text property queries."""

PROPERTY_TYPE_KEYWORDS = (
    'house', 'apartment', 'villa', 'condo', 'studio', 'duplex', 'penthouse',
)

AMENITY_KEYWORDS = (
    'pool', 'garden', 'garage', 'balcony', 'terrace', 'parking', 'furnished',
    'air conditioning', 'wifi', 'elevator', 'security', 'gym', 'modern',
    'fireplace', 'basement', 'storage', 'view', 'waterfront', 'mountain view',
)

LISTING_TYPE_KEYWORDS = ('rent', 'sale', 'construction')

# Lower-cased, in match priority order
CITY_NAMES = (
    'algiers', 'oran', 'constantine', 'annaba', 'blida', 'batna', 'djelfa',
    'sétif', 'sidi bel abbès', 'biskra',
)
