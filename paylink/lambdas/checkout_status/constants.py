MISSING_CS = 'MISSING_CS'
STATUS_LOOKUP_FAILED = 'STATUS_LOOKUP_FAILED'
STATUS_LOOKUP_SUCCESS = 'STATUS_LOOKUP_SUCCESS'
