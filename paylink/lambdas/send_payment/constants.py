PAYMENT_LINK_SENT = 'PAYMENT_LINK_SENT'
PAYMENT_LINK_REJECTED = 'PAYMENT_LINK_REJECTED'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
