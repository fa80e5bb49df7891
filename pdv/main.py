from __future__ import annotations

from pdv.core.application import create_application


# Instância global para uvicorn: `uvicorn pdv.main:app --reload`
app = create_application()
