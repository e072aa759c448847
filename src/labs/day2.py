"""Day 2 labs: advanced queries, aggregation, indexing, geospatial and text search."""

from __future__ import annotations

from typing import Any

from .context import LabContext, registry

LOS_ANGELES = [-118.2437, 34.0522]
SAN_FRANCISCO = [-122.4194, 37.7749]
CHICAGO = [-87.6298, 41.8781]
EARTH_RADIUS_MILES = 3963.2
NYC_ZONE = [[
    [-74.0, 40.7],
    [-74.0, 40.8],
    [-73.9, 40.8],
    [-73.9, 40.7],
    [-74.0, 40.7],
]]


# =============================================================================
# Lab 6: Advanced Query Techniques
# =============================================================================


@registry.step(
    "Lab6", "Step1", "Complex AND/OR policy query", min_results=2,
    source='db.policies.find({ $and: [{ annualPremium: { $gt: 500 } }, { $or: [{ policyType: "Property" }, { policyType: "Auto" }] }] })',
)
def and_or_query(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find({
        "$and": [
            {"annualPremium": {"$gt": 500}},
            {"$or": [{"policyType": "Property"}, {"policyType": "Auto"}]},
        ]
    })


@registry.step(
    "Lab6", "Step2", "Orders with a multi-quantity item",
    source="db.orders.find({ items: { $elemMatch: { quantity: { $gte: 2 } } } })",
)
def elem_match_orders(ctx: LabContext) -> Any:
    return ctx.ecommerce.orders.find({"items": {"$elemMatch": {"quantity": {"$gte": 2}}}})


@registry.step(
    "Lab6", "Step3", "Customers with company email",
    source='db.customers.find({ email: { $regex: /@company\\.com$/ } })',
)
def regex_email(ctx: LabContext) -> Any:
    return ctx.insurance.customers.find({"email": {"$regex": r"@company\.com$"}})


@registry.step(
    "Lab6", "Step4", "Claims with a recorded location", min_results=5,
    source="db.claims.find({ location: { $exists: true } })",
)
def claims_with_location(ctx: LabContext) -> Any:
    return ctx.insurance.claims.find({"location": {"$exists": True}})


@registry.step(
    "Lab6", "Step5", "Policies covering liability and collision", min_results=2,
    source='db.policies.find({ coverageTypes: { $all: ["liability", "collision"] } })',
)
def all_coverage_types(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find({"coverageTypes": {"$all": ["liability", "collision"]}})


@registry.step(
    "Lab6", "Step6", "Agents above sales target",
    source='db.agents.find({ $expr: { $gt: ["$performance.salesActual", "$performance.salesTarget"] } })',
)
def agents_above_target(ctx: LabContext) -> Any:
    return ctx.insurance.agents.find({
        "$expr": {"$gt": ["$performance.salesActual", "$performance.salesTarget"]}
    })


# =============================================================================
# Lab 7: Aggregation Framework
# =============================================================================


@registry.step(
    "Lab7", "Step1", "Average premium by policy type", min_results=4,
    source='db.policies.aggregate([{ $group: { _id: "$policyType", avgPremium: { $avg: "$annualPremium" }, count: { $sum: 1 } } }])',
)
def premium_by_type(ctx: LabContext) -> Any:
    return ctx.insurance.policies.aggregate([
        {"$group": {
            "_id": "$policyType",
            "avgPremium": {"$avg": "$annualPremium"},
            "count": {"$sum": 1},
        }},
        {"$sort": {"avgPremium": -1}},
    ])


@registry.step(
    "Lab7", "Step2", "Join orders with customers", min_results=5,
    source='db.orders.aggregate([{ $lookup: { from: "customers", localField: "customerId", foreignField: "_id", as: "customer" } }, { $unwind: "$customer" }])',
)
def orders_with_customers(ctx: LabContext) -> Any:
    return ctx.ecommerce.orders.aggregate([
        {"$lookup": {
            "from": "customers",
            "localField": "customerId",
            "foreignField": "_id",
            "as": "customer",
        }},
        {"$unwind": "$customer"},
    ])


@registry.step(
    "Lab7", "Step3", "Revenue by product category", min_results=3,
    source='db.orders.aggregate([{ $unwind: "$items" }, { $lookup: { from: "products", localField: "items.productId", foreignField: "_id", as: "product" } }, { $unwind: "$product" }, { $group: { _id: "$product.category", revenue: { $sum: { $multiply: ["$items.price", "$items.quantity"] } } } }])',
)
def revenue_by_category(ctx: LabContext) -> Any:
    return ctx.ecommerce.orders.aggregate([
        {"$unwind": "$items"},
        {"$lookup": {
            "from": "products",
            "localField": "items.productId",
            "foreignField": "_id",
            "as": "product",
        }},
        {"$unwind": "$product"},
        {"$group": {
            "_id": "$product.category",
            "revenue": {"$sum": {"$multiply": ["$items.price", "$items.quantity"]}},
        }},
        {"$sort": {"revenue": -1}},
    ])


@registry.step(
    "Lab7", "Step4", "Claims faceted by status and type",
    source='db.claims.aggregate([{ $facet: { byStatus: [{ $sortByCount: "$status" }], byType: [{ $sortByCount: "$claimType" }] } }])',
)
def claims_facets(ctx: LabContext) -> Any:
    return ctx.insurance.claims.aggregate([
        {"$facet": {
            "byStatus": [{"$sortByCount": "$status"}],
            "byType": [{"$sortByCount": "$claimType"}],
        }}
    ])


@registry.step(
    "Lab7", "Step5", "Claims bucketed by amount", min_results=3,
    source='db.claims.aggregate([{ $bucket: { groupBy: "$claimAmount", boundaries: [0, 5000, 20000, 100000, 1000000], default: "other" } }])',
)
def claims_buckets(ctx: LabContext) -> Any:
    return ctx.insurance.claims.aggregate([
        {"$bucket": {
            "groupBy": "$claimAmount",
            "boundaries": [0, 5000, 20000, 100000, 1000000],
            "default": "other",
            "output": {"count": {"$sum": 1}, "total": {"$sum": "$claimAmount"}},
        }}
    ])


@registry.step(
    "Lab7", "Step6", "Claims joined to their policies", min_results=5,
    source='db.claims.aggregate([{ $lookup: { from: "policies", localField: "policyNumber", foreignField: "policyNumber", as: "policy" } }, { $match: { policy: { $ne: [] } } }])',
)
def claims_with_policies(ctx: LabContext) -> Any:
    return ctx.insurance.claims.aggregate([
        {"$lookup": {
            "from": "policies",
            "localField": "policyNumber",
            "foreignField": "policyNumber",
            "as": "policy",
        }},
        {"$match": {"policy": {"$ne": []}}},
    ])


# =============================================================================
# Lab 8: Indexing and Performance
# =============================================================================


@registry.step(
    "Lab8", "Step1", "Create compound index on claims",
    source="db.claims.createIndex({ status: 1, claimAmount: -1 })",
)
def create_compound_index(ctx: LabContext) -> Any:
    return ctx.insurance.claims.create_index([("status", 1), ("claimAmount", -1)])


@registry.step(
    "Lab8", "Step2", "Create partial index on active agents",
    source="db.agents.createIndex({ email: 1 }, { partialFilterExpression: { isActive: true } })",
)
def create_partial_index(ctx: LabContext) -> Any:
    return ctx.insurance.agents.create_index(
        [("email", 1)],
        partialFilterExpression={"isActive": True},
    )


@registry.step(
    "Lab8", "Step3", "Create TTL index",
    source="db.session_tokens.createIndex({ createdAt: 1 }, { expireAfterSeconds: 3600 })",
)
def create_ttl_index(ctx: LabContext) -> Any:
    return ctx.insurance.session_tokens.create_index([("createdAt", 1)], expireAfterSeconds=3600)


@registry.step("Lab8", "Step4", "List policy indexes", min_results=4, source="db.policies.getIndexes()")
def list_policy_indexes(ctx: LabContext) -> Any:
    return ctx.insurance.policies.list_indexes()


@registry.step(
    "Lab8", "Step5", "Explain an indexed query",
    source='db.policies.find({ policyType: "Auto" }).explain("executionStats")',
)
def explain_query(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find({"policyType": "Auto"}).explain()


@registry.step(
    "Lab8", "Step6", "Query with an index hint", min_results=2,
    source='db.policies.find({ policyType: "Auto", isActive: true }).hint("policyType_1_isActive_1")',
)
def hinted_query(ctx: LabContext) -> Any:
    return ctx.insurance.policies.find({"policyType": "Auto", "isActive": True}).hint(
        "policyType_1_isActive_1"
    )


# =============================================================================
# Lab 9: Geospatial and Text Search
# =============================================================================


@registry.step(
    "Lab9", "Step1", "Stores within 10km of Los Angeles",
    source='db.stores.find({ location: { $near: { $geometry: { type: "Point", coordinates: [-118.2437, 34.0522] }, $maxDistance: 10000 } } })',
)
def stores_near_los_angeles(ctx: LabContext) -> Any:
    return ctx.ecommerce.stores.find({
        "location": {
            "$near": {
                "$geometry": {"type": "Point", "coordinates": LOS_ANGELES},
                "$maxDistance": 10000,
            }
        }
    })


@registry.step(
    "Lab9", "Step2", "Auto or commercial branches near San Francisco",
    source='db.branches.find({ location: { $near: { $geometry: { type: "Point", coordinates: [-122.4194, 37.7749] }, $maxDistance: 15000 } }, specialties: { $in: ["Auto", "Commercial"] } })',
)
def branches_near_san_francisco(ctx: LabContext) -> Any:
    return ctx.insurance.branches.find({
        "location": {
            "$near": {
                "$geometry": {"type": "Point", "coordinates": SAN_FRANCISCO},
                "$maxDistance": 15000,
            }
        },
        "specialties": {"$in": ["Auto", "Commercial"]},
    })


@registry.step(
    "Lab9", "Step3", "Branches within 10 miles of Chicago",
    source="db.branches.find({ location: { $geoWithin: { $centerSphere: [[-87.6298, 41.8781], 10 / 3963.2] } } })",
)
def branches_within_chicago(ctx: LabContext) -> Any:
    return ctx.insurance.branches.find({
        "location": {"$geoWithin": {"$centerSphere": [CHICAGO, 10 / EARTH_RADIUS_MILES]}}
    })


@registry.step(
    "Lab9", "Step4", "Branches inside the NYC coverage zone",
    source='db.branches.find({ location: { $geoWithin: { $geometry: { type: "Polygon", coordinates: [[[-74.0, 40.7], [-74.0, 40.8], [-73.9, 40.8], [-73.9, 40.7], [-74.0, 40.7]]] } } } })',
)
def branches_in_polygon(ctx: LabContext) -> Any:
    return ctx.insurance.branches.find({
        "location": {"$geoWithin": {"$geometry": {"type": "Polygon", "coordinates": NYC_ZONE}}}
    })


@registry.step(
    "Lab9", "Step5", "Nearest stores with distance",
    source='db.stores.aggregate([{ $geoNear: { near: { type: "Point", coordinates: [-118.2437, 34.0522] }, distanceField: "distance", maxDistance: 50000, spherical: true } }])',
)
def geo_near_stores(ctx: LabContext) -> Any:
    return ctx.ecommerce.stores.aggregate([
        {"$geoNear": {
            "near": {"type": "Point", "coordinates": LOS_ANGELES},
            "distanceField": "distance",
            "maxDistance": 50000,
            "spherical": True,
        }}
    ])


@registry.step(
    "Lab9", "Step6", "Text search for products", min_results=2,
    source='db.products.find({ $text: { $search: "Pro" } })',
)
def text_search_products(ctx: LabContext) -> Any:
    return ctx.ecommerce.products.find({"$text": {"$search": "Pro"}})


@registry.step(
    "Lab9", "Step7", "Text search reviews ranked by score", min_results=2,
    source='db.reviews.find({ $text: { $search: "claim" } }, { score: { $meta: "textScore" } }).sort({ score: { $meta: "textScore" } })',
)
def text_search_reviews(ctx: LabContext) -> Any:
    return ctx.insurance.reviews.find(
        {"$text": {"$search": "claim"}},
        {"score": {"$meta": "textScore"}},
    ).sort([("score", {"$meta": "textScore"})])
