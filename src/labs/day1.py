"""Day 1 labs: shell navigation, collection management and CRUD."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bson import Binary, Decimal128, ObjectId
from pymongo import ReturnDocument
from pymongo.collation import Collation
from pymongo.errors import DuplicateKeyError

from .context import LabContext, registry

SCRATCH_COLLECTION = "test_lab3"


# =============================================================================
# Lab 1: Shell Mastery and Server Navigation
# =============================================================================


@registry.step("Lab1", "Step1", "Check server build info", source="db.version()")
def server_build_info(ctx: LabContext) -> Any:
    return ctx.client.server_info()


@registry.step("Lab1", "Step2", "List all databases", min_results=2, source="show dbs")
def list_databases(ctx: LabContext) -> Any:
    return ctx.client.list_database_names()


@registry.step("Lab1", "Step3", "Get database name", source="db.getName()")
def database_name(ctx: LabContext) -> Any:
    return ctx.insurance.name


@registry.step("Lab1", "Step4", "Show collections in insurance_company", min_results=6, source="show collections")
def list_collections(ctx: LabContext) -> Any:
    return ctx.insurance.list_collection_names()


@registry.step("Lab1", "Step5", "Check server status", source="db.serverStatus()")
def server_status(ctx: LabContext) -> Any:
    return ctx.insurance.command("serverStatus")


@registry.step("Lab1", "Step6", "Get profiling status", source="db.getProfilingStatus()")
def profiling_status(ctx: LabContext) -> Any:
    return ctx.insurance.command("profile", -1)


@registry.step("Lab1", "Step7", "Count branches", min_results=5, source="db.branches.countDocuments()")
def count_branches(ctx: LabContext) -> Any:
    return ctx.insurance.branches.count_documents({})


@registry.step("Lab1", "Step8", "Estimate policy count", source="db.policies.estimatedDocumentCount()")
def estimate_policies(ctx: LabContext) -> Any:
    return ctx.insurance.policies.estimated_document_count()


# =============================================================================
# Lab 2: Database and Collection Management
# =============================================================================


@registry.step("Lab2", "Step1", "Get database statistics", source="db.stats()")
def database_stats(ctx: LabContext) -> Any:
    return ctx.insurance.command("dbStats")


@registry.step("Lab2", "Step2", "Get database statistics in KB", source="db.stats(1024)")
def database_stats_kb(ctx: LabContext) -> Any:
    return ctx.insurance.command("dbStats", scale=1024)


@registry.step("Lab2", "Step3", "Create basic collection", source='db.createCollection("lab2_customers")')
def create_basic_collection(ctx: LabContext) -> Any:
    ctx.insurance.drop_collection("lab2_customers")
    return ctx.insurance.create_collection("lab2_customers")


@registry.step(
    "Lab2", "Step4", "Create capped collection",
    source='db.createCollection("audit_logs", { capped: true, size: 1000000, max: 5000 })',
)
def create_capped_collection(ctx: LabContext) -> Any:
    ctx.insurance.drop_collection("audit_logs")
    return ctx.insurance.create_collection("audit_logs", capped=True, size=1_000_000, max=5000)


@registry.step(
    "Lab2", "Step5", "Create collection with collation",
    source='db.createCollection("international_policies", { collation: { locale: "en", strength: 1 } })',
)
def create_collated_collection(ctx: LabContext) -> Any:
    ctx.insurance.drop_collection("international_policies")
    return ctx.insurance.create_collection(
        "international_policies",
        collation=Collation(locale="en", strength=1),
    )


@registry.step(
    "Lab2", "Step6", "Create collection with schema validation",
    source='db.createCollection("test_lab2", { validator: { $jsonSchema: { bsonType: "object", required: ["name", "type"] } } })',
)
def create_validated_collection(ctx: LabContext) -> Any:
    ctx.insurance.drop_collection("test_lab2")
    return ctx.insurance.create_collection(
        "test_lab2",
        validator={"$jsonSchema": {"bsonType": "object", "required": ["name", "type"]}},
    )


@registry.step("Lab2", "Step7", "Check if collection is capped", source="db.audit_logs.isCapped()")
def collection_is_capped(ctx: LabContext) -> Any:
    return ctx.insurance.audit_logs.options().get("capped", False)


@registry.step(
    "Lab2", "Step8", "Get collection statistics",
    source="db.customers.aggregate([{ $collStats: { storageStats: {} } }])",
)
def collection_stats(ctx: LabContext) -> Any:
    return ctx.insurance.customers.aggregate([{"$collStats": {"storageStats": {}}}])


# =============================================================================
# Lab 3: Create and Insert
# =============================================================================


@registry.step("Lab3", "Step1", "Reset scratch collection", min_results=0, source="db.test_lab3.drop()")
def reset_scratch(ctx: LabContext) -> Any:
    return ctx.insurance.drop_collection(SCRATCH_COLLECTION)


@registry.step(
    "Lab3", "Step2", "insertOne with ObjectId generation",
    source='db.test_lab3.insertOne({ name: "Test Policy", type: "Auto", premium: 1200.00, created: new Date() })',
)
def insert_generated_id(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].insert_one({
        "name": "Test Policy",
        "type": "Auto",
        "premium": 1200.00,
        "created": datetime.now(timezone.utc),
    })


@registry.step(
    "Lab3", "Step3", "insertOne with custom _id",
    source='db.test_lab3.insertOne({ _id: "CUSTOM-001", name: "Custom ID Policy", type: "Home" })',
)
def insert_custom_id(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].insert_one(
        {"_id": "CUSTOM-001", "name": "Custom ID Policy", "type": "Home"}
    )


@registry.step(
    "Lab3", "Step4", "insertMany bulk operation", min_results=3,
    source='db.test_lab3.insertMany([{ type: "Life", premium: 500 }, { type: "Business", premium: 2000 }, { type: "Travel", premium: 150 }])',
)
def insert_many(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].insert_many([
        {"type": "Life", "premium": 500},
        {"type": "Business", "premium": 2000},
        {"type": "Travel", "premium": 150},
    ])


@registry.step(
    "Lab3", "Step5", "Insert document with BSON types",
    source='db.test_lab3.insertOne({ policyNumber: "POL-MULTI-001", premiumAmount: NumberDecimal("1299.99"), deductible: NumberInt(500), encrypted_data: BinData(0, "SGVsbG8gV29ybGQ="), objectIdField: new ObjectId() })',
)
def insert_bson_types(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].insert_one({
        "policyNumber": "POL-MULTI-001",
        "policyType": "Auto",
        "premiumAmount": Decimal128("1299.99"),
        "deductible": 500,
        "coverageLimit": 250000,
        "active": True,
        "coverageTypes": ["collision", "comprehensive"],
        "metadata": {"created": datetime.now(timezone.utc), "version": 1},
        "encrypted_data": Binary(b"Hello World", 0),
        "nullField": None,
        "objectIdField": ObjectId(),
    })


@registry.step(
    "Lab3", "Step6", "Duplicate _id is rejected",
    source="db.test_lab3.insertOne({ _id: \"CUSTOM-001\", test: \"duplicate\" })",
)
def duplicate_id_rejected(ctx: LabContext) -> Any:
    try:
        ctx.insurance[SCRATCH_COLLECTION].insert_one({"_id": "CUSTOM-001", "test": "duplicate"})
    except DuplicateKeyError:
        return True
    return False


# =============================================================================
# Lab 4: Read Operations
# =============================================================================


@registry.step("Lab4", "Step1", "Find auto policies", min_results=3, source='db.policies.find({ policyType: "Auto" })')
def find_auto_policies(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find({"policyType": "Auto"})


@registry.step(
    "Lab4", "Step2", "Project policy number and premium",
    source="db.policies.find({}, { policyNumber: 1, annualPremium: 1, _id: 0 })",
)
def project_policies(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find({}, {"policyNumber": 1, "annualPremium": 1, "_id": 0})


@registry.step(
    "Lab4", "Step3", "Policies with premium over 1000", min_results=2,
    source="db.policies.find({ annualPremium: { $gt: 1000 } })",
)
def premium_over_threshold(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find({"annualPremium": {"$gt": 1000}})


@registry.step(
    "Lab4", "Step4", "Policies of selected types", min_results=2,
    source='db.policies.find({ policyType: { $in: ["Life", "Cyber"] } })',
)
def policies_in_types(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find({"policyType": {"$in": ["Life", "Cyber"]}})


@registry.step(
    "Lab4", "Step5", "Top three premiums", min_results=3,
    source="db.policies.find().sort({ annualPremium: -1 }).limit(3)",
)
def top_premiums(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find().sort("annualPremium", -1).limit(3)


@registry.step(
    "Lab4", "Step6", "Count active customers",
    source="db.customers.countDocuments({ isActive: true })",
)
def count_active_customers(ctx: LabContext) -> Any:
    return ctx.insurance.customers.count_documents({"isActive": True})


@registry.step("Lab4", "Step7", "Distinct policy types", min_results=4, source='db.policies.distinct("policyType")')
def distinct_policy_types(ctx: LabContext) -> Any:
    return ctx.insurance.policies.distinct("policyType")


@registry.step(
    "Lab4", "Step8", "Find a single customer",
    source='db.customers.findOne({ customerId: "CUST000001" })',
)
def find_one_customer(ctx: LabContext) -> Any:
    return ctx.insurance.customers.find_one({"customerId": "CUST000001"})


# =============================================================================
# Lab 5: Update and Delete
# =============================================================================


@registry.step(
    "Lab5", "Step1", "Update claim status",
    source='db.claims.updateOne({ claimNumber: "CLM-2024-001008" }, { $set: { status: "under_review" } })',
)
def update_claim_status(ctx: LabContext) -> Any:
    return ctx.insurance.claims.update_one(
        {"claimNumber": "CLM-2024-001008"},
        {"$set": {"status": "under_review"}},
    )


@registry.step(
    "Lab5", "Step2", "Mark scratch documents reviewed",
    source="db.test_lab3.updateMany({ type: { $exists: true } }, { $set: { reviewed: true } })",
)
def update_many_reviewed(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].update_many(
        {"type": {"$exists": True}},
        {"$set": {"reviewed": True}},
    )


@registry.step(
    "Lab5", "Step3", "Upsert a document",
    source='db.test_lab3.updateOne({ _id: "UPSERT-001" }, { $set: { type: "Pet", premium: 300 } }, { upsert: true })',
)
def upsert_document(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].update_one(
        {"_id": "UPSERT-001"},
        {"$set": {"type": "Pet", "premium": 300}},
        upsert=True,
    )


@registry.step(
    "Lab5", "Step4", "Replace a document",
    source='db.test_lab3.replaceOne({ _id: "CUSTOM-001" }, { name: "Replaced Policy", type: "Home", premium: 950 })',
)
def replace_document(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].replace_one(
        {"_id": "CUSTOM-001"},
        {"name": "Replaced Policy", "type": "Home", "premium": 950},
    )


@registry.step(
    "Lab5", "Step5", "Increment and return updated document",
    source='db.test_lab3.findOneAndUpdate({ _id: "CUSTOM-001" }, { $inc: { premium: 50 } }, { returnDocument: "after" })',
)
def find_one_and_update(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].find_one_and_update(
        {"_id": "CUSTOM-001"},
        {"$inc": {"premium": 50}},
        return_document=ReturnDocument.AFTER,
    )


@registry.step("Lab5", "Step6", "Delete one document", source='db.test_lab3.deleteOne({ _id: "UPSERT-001" })')
def delete_one(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].delete_one({"_id": "UPSERT-001"})


@registry.step("Lab5", "Step7", "Delete many documents", source='db.test_lab3.deleteMany({ type: "Travel" })')
def delete_many(ctx: LabContext) -> Any:
    return ctx.insurance[SCRATCH_COLLECTION].delete_many({"type": "Travel"})
