from decouple import config

DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", default="XOF")
STRIPE_SECRET_KEY = config("STRIPE_SECRET_KEY", default="sk_test_...")
STRIPE_WEBHOOK_SECRET = config("STRIPE_WEBHOOK_SECRET", default="whsec_...")
# Note: minimum 30 minutes
PAYMENT_DEFAULT_EXPIRY_MINUTES = max(config("PAYMENT_DEFAULT_EXPIRY_MINUTES", cast=int, default=45), 30)
# {sale_id} is substituted for every sale
PAYMENT_SUCCESS_URL = config(
    "PAYMENT_SUCCESS_URL", default="http://localhost:8000/api/payments/callback/{sale_id}?status=completed"
)
PAYMENT_FAILURE_URL = config(
    "PAYMENT_FAILURE_URL", default="http://localhost:8000/api/payments/callback/{sale_id}?status=cancelled"
)
