"""User-user collaborative filtering over a sparse (userId, itemId, rating) set.

Core idea:
- Index ratings by user and by item (`store`)
- Score every other user by shrunk cosine similarity (`similarity`)
- Keep the K most similar users as neighbors (`neighbors`)
- Predict unseen items by similarity-weighted average of neighbor ratings (`predict`)
- Fall back to global item popularity when nothing can be predicted (`popularity`)
"""
