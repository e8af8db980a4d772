# Services package init
"""
Accounting Notes Backend: Services Layer
========================================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless services receive the request's AsyncSession per call;
       collaborators (storage, speech engine) are constructor arguments.

Service Inventory:
    - CategoryService: category CRUD and lookups
    - TopicService: topic CRUD, title search, previous/next navigation
    - NotesService: note text + narration pipeline
    - UserService: admin registration and login
    - TextNormalizer / AbbreviationTable: text → speakable text
    - SpeechSynthesizer (abstract) / GTTSSynthesizer: speakable text → MP3
    - StorageService: MP3 → public URL in the bucket
"""
