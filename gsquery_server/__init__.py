"""GameSpy Query Protocol v4 responder"""
