INVALID_SIGNATURE = 'INVALID_SIGNATURE'
WEBHOOK_HANDLER_FAILED = 'WEBHOOK_HANDLER_FAILED'
WEBHOOK_PROCESSED = 'WEBHOOK_PROCESSED'
