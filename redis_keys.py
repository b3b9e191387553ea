REDIS_ROOM_KEY = "pp:room:{room_id}" # room id - JSON snapshot of the room, expires with the room TTL

# **Example `pp:room:{id}` value**
# {
#   "roomId": "48213",
#   "createdAt": 1760870000000,
#   "updatedAt": 1760870004211,
#   "cardPack": "goat",
#   "forcedReveal": false,
#   "adminToken": "uuid4",
#   "connections": {"<sessionId>": {"sessionId": "...", "voter": true, "vote": "5", "joinedAt": ..., "updatedAt": ...}}
# }
