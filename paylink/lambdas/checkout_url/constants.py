CHECKOUT_URL_CREATED = 'CHECKOUT_URL_CREATED'
CHECKOUT_URL_REJECTED = 'CHECKOUT_URL_REJECTED'
INVALID_API_KEY = 'INVALID_API_KEY'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
