# run.py
import os
from menuphotos import create_app

app = create_app(light=False)


def _print_banner(host: str, port: int) -> str:
    url = f"http://{host}:{port}"
    banner = (
        "\n────────────────────────────────────────\n"
        f"  Menu photo admin API at: {url}\n"
        f"  Preview: {url}/api/photo-assignments/preview\n"
        f"  Counts:  {url}/api/maintenance/_counts\n"
        f"  Pool:    {app.config['PHOTO_POOL_CONFIG']}\n"
        "────────────────────────────────────────\n"
    )
    # logger 和 stdout 都打一份
    app.logger.info(banner)
    print(banner, flush=True)
    return url


if __name__ == "__main__":
    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "5000"))
    _print_banner(host, port)
    # 单进程，便于排错
    app.run(host=host, port=port, debug=False, use_reloader=False)
