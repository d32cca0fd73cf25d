from lnurlkit.core.settings import settings

settings.debug = True
settings.log_level = "TRACE"
settings.lnurl_timeout = 5
settings.lnurl_verify_tls = True
settings.lnurl_check_invoice_amount = False
settings.socks_proxy = None
settings.http_proxy = None
