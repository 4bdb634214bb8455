import os

import uvicorn


def main() -> None:
    uvicorn.run(
        'dairy_auth.main:app',
        host=os.getenv('HOST', '0.0.0.0'),
        port=int(os.getenv('PORT', '8000')),
        proxy_headers=True,
    )


if __name__ == '__main__':
    main()
