"""Docker, HTTP, TCP and command health checkers, their configuration and stubs."""