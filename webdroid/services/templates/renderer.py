"""
Android project templates.

Each function renders one file of the generated project. They are pure: the
output depends only on the arguments, so identical inputs give identical text.
"""

from __future__ import annotations

from ...models.project import PermissionProfile, ProjectConfig

COMPILE_SDK = 33
MIN_SDK = 24
TARGET_SDK = 33
APPCOMPAT_VERSION = "1.6.1"
CONSTRAINTLAYOUT_VERSION = "2.1.4"
ENTRY_POINT_URL = "file:///android_asset/index.html"


def render_manifest(config: ProjectConfig, permissions: PermissionProfile) -> str:
    """Render ``AndroidManifest.xml``.

    INTERNET is always declared; the other permissions follow the profile,
    custom ones last and in order.
    """
    uses_permissions = "\n".join(
        f'    <uses-permission android:name="{name}" />'
        for name in permissions.declared_permissions()
    )
    return f'''<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android"
    package="{config.package_name}">

{uses_permissions}

    <application
        android:allowBackup="true"
        android:icon="@mipmap/ic_launcher"
        android:label="{config.app_name}"
        android:roundIcon="@mipmap/ic_launcher_round"
        android:supportsRtl="true"
        android:theme="@style/Theme.AppCompat.Light.NoActionBar">
        <activity
            android:name=".MainActivity"
            android:exported="true">
            <intent-filter>
                <action android:name="android.intent.action.MAIN" />
                <category android:name="android.intent.category.LAUNCHER" />
            </intent-filter>
        </activity>
    </application>

</manifest>
'''


def render_main_activity(config: ProjectConfig, permissions: PermissionProfile) -> str:
    """Render ``MainActivity.java``.

    The WebView runs JavaScript with DOM storage, loads the packaged
    ``index.html`` and consumes back presses while it has history. The
    geolocation bridge is only emitted for profiles that use location.
    """
    imports = [
        "android.os.Bundle",
        "android.webkit.WebSettings",
        "android.webkit.WebView",
        "android.webkit.WebViewClient",
        "androidx.appcompat.app.AppCompatActivity",
    ]
    geolocation = ""
    if permissions.uses_location:
        imports += [
            "android.webkit.GeolocationPermissions",
            "android.webkit.WebChromeClient",
        ]
        geolocation = '''
        webSettings.setGeolocationEnabled(true);
        myWebView.setWebChromeClient(new WebChromeClient() {
            @Override
            public void onGeolocationPermissionsShowPrompt(String origin, GeolocationPermissions.Callback callback) {
                callback.invoke(origin, true, false);
            }
        });
'''
    import_lines = "\n".join(f"import {name};" for name in sorted(imports))

    return f'''package {config.package_name};

{import_lines}

public class MainActivity extends AppCompatActivity {{

    private WebView myWebView;

    @Override
    protected void onCreate(Bundle savedInstanceState) {{
        super.onCreate(savedInstanceState);
        setContentView(R.layout.activity_main);

        myWebView = findViewById(R.id.webview);
        WebSettings webSettings = myWebView.getSettings();
        webSettings.setJavaScriptEnabled(true);
        webSettings.setDomStorageEnabled(true);
        webSettings.setAllowFileAccess(true);
        webSettings.setAllowContentAccess(true);
{geolocation}
        myWebView.setWebViewClient(new WebViewClient());

        // Load the packaged entry point
        myWebView.loadUrl("{ENTRY_POINT_URL}");
    }}

    @Override
    public void onBackPressed() {{
        if (myWebView.canGoBack()) {{
            myWebView.goBack();
        }} else {{
            super.onBackPressed();
        }}
    }}
}}
'''


def render_layout() -> str:
    """Render ``activity_main.xml``: a full-screen WebView."""
    return '''<?xml version="1.0" encoding="utf-8"?>
<androidx.constraintlayout.widget.ConstraintLayout xmlns:android="http://schemas.android.com/apk/res/android"
    xmlns:app="http://schemas.android.com/apk/res-auto"
    xmlns:tools="http://schemas.android.com/tools"
    android:layout_width="match_parent"
    android:layout_height="match_parent">

    <WebView
        android:id="@+id/webview"
        android:layout_width="match_parent"
        android:layout_height="match_parent" />

</androidx.constraintlayout.widget.ConstraintLayout>
'''


def render_build_gradle(config: ProjectConfig) -> str:
    """Render the app module ``build.gradle``."""
    return f'''plugins {{
    id 'com.android.application'
}}

android {{
    namespace '{config.package_name}'
    compileSdk {COMPILE_SDK}

    defaultConfig {{
        applicationId "{config.package_name}"
        minSdk {MIN_SDK}
        targetSdk {TARGET_SDK}
        versionCode 1
        versionName "{config.version_name}"
    }}

    buildTypes {{
        release {{
            minifyEnabled false
            proguardFiles getDefaultProguardFile('proguard-android-optimize.txt'), 'proguard-rules.pro'
        }}
    }}
}}

dependencies {{
    implementation 'androidx.appcompat:appcompat:{APPCOMPAT_VERSION}'
    implementation 'androidx.constraintlayout:constraintlayout:{CONSTRAINTLAYOUT_VERSION}'
}}
'''


def render_github_workflow(config: ProjectConfig) -> str:
    """Render the GitHub Actions workflow that builds a debug APK on push."""
    artifact_name = f"{config.folder_name}-debug-apk"
    return f'''name: Build Android APK

on:
  push:
    branches: [ "main", "master" ]
  pull_request:
    branches: [ "main", "master" ]

jobs:
  build:
    runs-on: ubuntu-latest

    steps:
    - uses: actions/checkout@v4

    - name: Set up JDK 17
      uses: actions/setup-java@v4
      with:
        java-version: '17'
        distribution: 'temurin'
        cache: gradle

    - name: Setup Gradle
      uses: gradle/actions/setup-gradle@v3

    # The archive ships without a Gradle wrapper, so the runner's Gradle is used
    - name: Build Debug APK
      run: gradle app:assembleDebug

    - name: Upload APK
      uses: actions/upload-artifact@v4
      with:
        name: {artifact_name}
        path: app/build/outputs/apk/debug/app-debug.apk
'''
