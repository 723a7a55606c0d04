from contextlib import asynccontextmanager
from fastapi import FastAPI
from scheduling.routers import rou_booking, rou_trainer
from scheduling.configuration.config import Config
from scheduling.configuration.database import get_container
from scheduling.configuration.monitor import instrument_fastapi, log_event
from scheduling.services.svc_locks import trainer_date_locks
from scheduling.stores.sto_lease import LeaseStore

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Trainer/date leases shared by every worker process
    if Config.DISTRIBUTED_LOCKS:
        trainer_date_locks.configure_leases(LeaseStore(get_container("locks")))
        log_event("Distributed trainer/date locks enabled", {"container": Config.COSMOSDB_CONTAINER_NAME["locks"]})
    yield

app = FastAPI(
    title="Trainer Scheduling API",
    description="Session requests against trainer availability, with confirmation conflict resolution",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(rou_trainer.router)
app.include_router(rou_booking.router)

# Instrument app with Azure Monitor
instrument_fastapi(app)

if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host='0.0.0.0', port=8000)
