# teamtemp/db/base.py
from teamtemp.db.base_class import Base  # noqa: F401

# Importa todos los modelos que definen tablas para registrar la metadata
# (alembic autogenerate y create_all de los tests dependen de esto)
from teamtemp.models import team  # noqa: F401
from teamtemp.models import question  # noqa: F401
from teamtemp.models import rounds  # noqa: F401
from teamtemp.models import submission  # noqa: F401
