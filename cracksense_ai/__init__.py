"""CrackSense-AI.

Backend for a crack-inspection service: homeowners upload photos of wall or
foundation cracks, an LLM assesses severity and repair options, and a small
multi-agent router turns chat messages into inspection, repair advice,
product suggestions and professional referrals.

Core subpackages
----------------

- ``cracksense_ai.agent_core``:

  - Intent classification for free-text chat messages.
  - Inspection, recommendation, procurement and professional-finder agents
    built on Pydantic AI.
  - The coordinator that chains agents into a single chat answer.

- ``cracksense_ai.services``:

  - Credits ledger and pricing.
  - Homeowner crack analysis with retries.
  - Product catalog search, location lookups and crack-cause heuristics.

- ``cracksense_ai.core``:

  - Logging, Logfire monitoring, the SQLModel entities and repositories.

- ``cracksense_ai.server``:

  - The FastAPI application and its ``/api/v1`` routers.
"""

__version__ = "0.1.0"
