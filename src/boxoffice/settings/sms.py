from decouple import config

SMS_ENABLED = config("SMS_ENABLED", default=False, cast=bool)
SMS_API_URL = config("SMS_API_URL", default="https://api.freebusiness.sn/sms/1/text/single")
SMS_API_AUTHORIZATION = config("SMS_API_AUTHORIZATION", default="")
SMS_SENDER = config("SMS_SENDER", default="BOXOFFICE")
SMS_TIMEOUT_SECONDS = config("SMS_TIMEOUT_SECONDS", default=10, cast=int)
# Prefixed to local nine-digit numbers when normalizing buyer phone numbers
PHONE_DEFAULT_COUNTRY_CODE = config("PHONE_DEFAULT_COUNTRY_CODE", default="221")
