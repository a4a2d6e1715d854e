"""One Client shared by many threads; each operation gets its own keypair and session."""

from concurrent.futures import ThreadPoolExecutor

WORKERS = 8


def test_parallel_batches_round_trip(client, server):
    def round_trip(i):
        credential = f"cred-t{i}"
        values = [[f"user{i}@example.com", f"ID-{i:04d}"], [i]]
        tokens = client.secure_protection_send(credential, values)["tokens"]
        return values, client.secure_protection_receive(credential, tokens)["values"]

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(round_trip, range(WORKERS * 2)))

    for sent, received in results:
        assert received == sent

    # one begin per send and per receive, each with a distinct client key
    assert len(server.client_keys) == WORKERS * 4
    assert len(set(server.client_keys)) == len(server.client_keys)


def test_parallel_channel_inserts(client, server):
    def stage(i):
        return client.secure_channel_insert(f"cred-c{i}", {"n": i})

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        staged = list(pool.map(stage, range(WORKERS * 2)))

    ids = [item["id"] for item in staged]
    tokens = [item["token"] for item in staged]
    assert len(set(ids)) == len(ids)
    assert len(set(tokens)) == len(tokens)
    assert len(set(server.client_keys)) == len(staged)

    for i, item in enumerate(staged):
        assert server.stored[item["token"]] == f'{{"n":{i}}}'.encode()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(client.secure_channel_commit, ids))
    assert sorted(server.committed) == sorted(ids)
