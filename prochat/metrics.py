from prometheus_client import Counter

SIGNUPS = Counter('prochat_signups_total', 'Accounts created')
LOGINS = Counter('prochat_logins_total', 'Login attempts', ['outcome'])
MESSAGES_SENT = Counter('prochat_messages_sent_total', 'Messages accepted by the store')
