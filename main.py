import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from database import (
    CLASSES,
    DATABASE_NAME,
    DATABASE_URL,
    INSTRUCTORS,
    SELECTED_CLASSES,
    USERS,
    client,
    create_document,
    db,
    delete_result,
    get_documents,
    insert_result,
    serialize_doc,
    to_object_id,
    update_result,
)
from schemas import (
    ClassAction,
    FeedbackRequest,
    Instructor,
    InstructorPromotion,
    LanguageClass,
    RegisterRequest,
    RoleChange,
    SelectedClass,
    User,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def ping_database():
    if client is None:
        logger.warning("No database configured; set DATABASE_URL or DB_USER/DB_PASS/DB_HOST")
        return
    try:
        client.admin.command("ping")
        logger.info("Pinged your deployment. You successfully connected to MongoDB!")
    except Exception:
        logger.exception("MongoDB ping failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    ping_database()
    yield


app = FastAPI(title="LinguaGenius API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def set_field(collection_name: str, id_str: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Upsert `fields` onto the document with the given _id."""
    result = db[collection_name].update_one(
        {"_id": to_object_id(id_str)},
        {"$set": fields},
        upsert=True,
    )
    return update_result(result)


@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "Lingua is speaking"


@app.get("/test")
def test_database():
    """Report whether the configured database is reachable and what it holds."""
    resp = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if DATABASE_URL else "❌ Not Set",
        "database_name": DATABASE_NAME,
        "connection_status": "Not Connected",
        "collections": [],
        "documents": {},
    }
    if db is None:
        resp["database"] = "⚠️  Available but not initialized"
        return resp
    try:
        resp["collections"] = db.list_collection_names()[:10]
        resp["documents"] = {
            name: db[name].count_documents({})
            for name in (CLASSES, INSTRUCTORS, USERS, SELECTED_CLASSES)
        }
        resp["database"] = "✅ Connected & Working"
        resp["connection_status"] = "Connected"
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        resp["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return resp


# Catalog

@app.get("/classes")
def list_classes() -> List[Dict[str, Any]]:
    return get_documents(CLASSES)


@app.get("/popularClasses")
def popular_classes() -> List[Dict[str, Any]]:
    return get_documents(
        CLASSES,
        {"status": "approved"},
        limit=6,
        sort=[("availableSeats", 1)],
    )


@app.get("/instructors")
def list_instructors() -> List[Dict[str, Any]]:
    return get_documents(INSTRUCTORS)


@app.get("/class-by-instructor")
def classes_by_instructor(email: Optional[str] = None):
    return get_documents(CLASSES, {"instructorEmail": email})


# Users

@app.get("/user-info")
def user_info(email: Optional[str] = None):
    return serialize_doc(db[USERS].find_one({"email": email}))


@app.get("/all-users")
def all_users():
    return get_documents(USERS)


@app.post("/register-user")
def register_user(payload: RegisterRequest):
    # Best-effort check; concurrent registrations can both get through.
    if db[USERS].find_one({"email": payload.userEmail}):
        return {"message": "user is already registered"}
    result = create_document(USERS, User(email=payload.userEmail, role="user"))
    logger.info("Registered user %s", payload.userEmail)
    return insert_result(result)


@app.post("/make-admin")
def make_admin(payload: RoleChange):
    logger.info("Promoting user %s to admin", payload.userID)
    return set_field(USERS, payload.userID, {"role": "admin"})


@app.post("/make-instructor")
def make_instructor(payload: InstructorPromotion):
    result = set_field(USERS, payload.userID, {"role": "instructor"})
    # Not atomic with the role change, and repeated promotions add more records.
    create_document(INSTRUCTORS, Instructor(name=payload.name, email=payload.email))
    logger.info("Promoting user %s to instructor", payload.userID)
    return result


# Class approval

@app.post("/add-instructor-class")
def add_instructor_class(payload: LanguageClass):
    doc = payload.model_dump(exclude_unset=True)
    doc["status"] = "pending"
    result = create_document(CLASSES, doc)
    logger.info("New class submitted by %s", doc.get("instructorEmail"))
    return insert_result(result)


@app.post("/approve-class")
def approve_class(payload: ClassAction):
    logger.info("Approving class %s", payload.classID)
    return set_field(CLASSES, payload.classID, {"status": "approved"})


@app.post("/deny-class")
def deny_class(payload: ClassAction):
    logger.info("Denying class %s", payload.classID)
    return set_field(CLASSES, payload.classID, {"status": "denied"})


@app.post("/send-feedback")
def send_feedback(payload: FeedbackRequest):
    logger.info("Feedback sent for class %s", payload.classID)
    return set_field(CLASSES, payload.classID, {"feedback": payload.message})


@app.post("/get-feedback")
def get_feedback(payload: ClassAction):
    return serialize_doc(db[CLASSES].find_one({"_id": to_object_id(payload.classID)}))


# Selections

@app.get("/selected-classes")
def selected_classes(email: Optional[str] = None):
    return get_documents(SELECTED_CLASSES, {"email": email})


@app.post("/add-class")
def add_class(payload: SelectedClass):
    query = {"classID": payload.classID, "email": payload.email}
    if db[SELECTED_CLASSES].find_one(query):
        return {"alreadySelected": True}
    # TODO: check whether the user has already paid for this class
    result = create_document(SELECTED_CLASSES, payload)
    logger.info("%s selected class %s", payload.email, payload.classID)
    return insert_result(result)


@app.delete("/remove-selected-class")
def remove_selected_class(id: str):
    result = db[SELECTED_CLASSES].delete_one({"_id": to_object_id(id)})
    logger.info("Removed selection %s (%d deleted)", id, result.deleted_count)
    return delete_result(result)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 5000))
    uvicorn.run(app, host="0.0.0.0", port=port)
