HEALTH = '/api/health'
CONFIG = '/api/config'
EVENT = '/api/event'
STATS = '/api/stats'
CONTENT = '/api/content'
PACKAGES = '/api/packages'
SPEAKERS = '/api/speakers'
CONTACT_INFO = '/api/contact-info'
CONTACT = '/api/contact'
UPLOAD_SPEAKER_IMAGE = '/api/upload/speaker-image'

ORDERS = '/api/orders'
VERIFY_PAYMENT = '/api/verify-payment'
PAYMENT_SUCCESS = '/api/payment-success'
WEBHOOK = '/api/razorpay-webhook'

ADMIN_LOGIN = '/api/admin/login'
ADMIN_LOGOUT = '/api/admin/logout'
ADMIN_CHECK_AUTH = '/api/admin/check-auth'
ADMIN_STATS = '/api/admin/stats'
ADMIN_ORDERS = '/api/admin/orders'
ADMIN_EVENT = '/api/admin/event'
ADMIN_CONTENT = '/api/admin/content'
ADMIN_PACKAGES = '/api/admin/packages'
ADMIN_SPEAKERS = '/api/admin/speakers'
ADMIN_CONTACT_FORMS = '/api/admin/contact-forms'
ADMIN_CONTACT_FORMS_EXPORT = '/api/admin/contact-forms/export'
ADMIN_CONTACT_INFO = '/api/admin/contact-info'
