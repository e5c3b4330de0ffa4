# Importing the package registers every table on database.Base
from models import users, product, batch, expense, sale, task, chat, log, outbox  # noqa: F401
