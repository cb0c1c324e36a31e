MISSING_TOKEN = 'MISSING_TOKEN'
SHORT_LINK_NOT_FOUND = 'SHORT_LINK_NOT_FOUND'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
