from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from db import create_tables
from routes.students import student_routes
from routes.payments import payment_routes
from routes.seats import seat_routes
from routes.reports import report_routes

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Study Hall Admin API",
    description="Students, seats, fee payments and revenue reports for the study hall",
    version="1.0.0"
)

# Configure CORS to allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)

# Health check endpoint
@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint to verify server status
    """
    return {
        "status": "healthy",
        "message": "Server is running successfully"
    }

# Register routers
app.include_router(student_routes.router)
app.include_router(payment_routes.router)
app.include_router(seat_routes.router)
app.include_router(report_routes.router)

# Create database tables on startup
@app.on_event("startup")
def on_startup():
    logger.info("Creating database tables...")
    create_tables()
    logger.info("Database tables created successfully!")

# Root endpoint
@app.get("/", tags=["Root"])
def read_root():
    return {
        "message": "Welcome to the Study Hall Admin API",
        "docs": "/docs",
        "health": "/health"
    }

if __name__ == "__main__":
    import uvicorn
    # Run on all IPs (0.0.0.0) to ensure accessibility
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
